"""Error taxonomy for report rendering.

Every class here is fatal for the render that raised it: the caller receives no
output bytes. Only the overflow-continuation loop in the content placer retries
anything, and that is ordinary control flow rather than error recovery.
"""

from typing import Optional


class ReportflowError(Exception):
    """Base class for all rendering failures."""


class ConfigurationError(ReportflowError):
    """Required setup (template, asset search path, ...) is missing before rendering starts."""


class LayoutOverflowError(ReportflowError):
    """A non-continuable placement did not fit into its fitbox."""

    def __init__(self, label: str, text: Optional[str] = None, kind: str = 'Textflow'):
        self.label = label
        self.text = text
        self.kind = kind
        if text:
            message = (
                f'The following Text for {kind} "{label}" is too big to fit into its '
                f'defined fitbox:\n{text}'
            )
        else:
            message = f'{kind} "{label}" is too big to fit into the defined fitbox'
            if kind == 'Textflow':
                message += '.'
        super().__init__(message)


class EngineResourceError(ReportflowError):
    """An image, vector graphic or font could not be loaded."""

    def __init__(self, path: str, message: str, resource: str = 'resource'):
        self.path = path
        self.message = message
        self.resource = resource
        super().__init__(f'Could not load {resource} from path "{path}". Error: {message}')


class EngineProtocolError(ReportflowError):
    """The engine reported failure where success was required."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f'Error: {message}')
