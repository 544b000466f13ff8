# Copyright (c) 2021, Neil Booth
#
# All rights reserved.
#
# Licensed under the the Open BSV License version 3; see LICENCE for details.
#

'''Exception hierarchy.'''

__all__ = (
    'ScriptError', 'MalformedInput',
)


#
# Exception Hierarchy
#


class ScriptError(Exception):
    '''Base class for script errors.'''


class MalformedInput(ScriptError, ValueError):
    '''Raised when the text a script is built from is not valid hexadecimal.'''

    def __init__(self, text, reason):
        super().__init__(text, reason)
        self.text = text
        self.reason = reason

    def __str__(self):
        return f'cannot convert {self.text!r} to a script: {self.reason}'
