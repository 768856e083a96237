"""Exception types raised by the pipeline stages."""


class PipelineError(Exception):
    """Base class for pipeline failures."""


class IngestError(PipelineError):
    """An input directory or file could not be read or parsed."""


class SchemaError(PipelineError, ValueError):
    """A filename tag or the column layout does not match what is expected."""


class DataQualityError(PipelineError, ValueError):
    """Too many values failed numeric/date coercion."""


class RenderError(PipelineError):
    """One or more charts could not be rendered.

    `entities` holds the identifiers that failed so they can be re-run alone;
    `completed` holds the manifest rows of the charts that were written.
    """

    def __init__(self, message, entities=None, completed=None):
        super().__init__(message)
        self.entities = list(entities or [])
        self.completed = completed
