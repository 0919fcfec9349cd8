# novelfactory/errors.py
"""Exception family shared by the engine, the dialog service and the CLI."""


class NovelFactoryError(Exception):
    """Base class; the CLI reports these without a traceback."""


class InvalidTemplate(NovelFactoryError, ValueError):
    def __init__(self, name):
        super().__init__(f"Unknown prompt template: {name!r}")
        self.name = name


class ReentrantDialog(NovelFactoryError, RuntimeError):
    def __init__(self, title: str):
        super().__init__(f"A dialog is already open; cannot show {title!r}")
        self.title = title


class MissingApiKey(NovelFactoryError):
    pass


class LLMError(NovelFactoryError):
    pass


class MissingBookData(NovelFactoryError):
    pass


class GenerationInProgress(NovelFactoryError):
    pass


class ProjectLimitReached(NovelFactoryError):
    pass


class ProjectNotFound(NovelFactoryError, KeyError):
    def __str__(self) -> str:  # KeyError quotes its argument
        return str(self.args[0]) if self.args else ""


class DataFileError(NovelFactoryError):
    """A file in the data directory could not be read back."""
