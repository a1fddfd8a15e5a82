class VttTranslateError(Exception):
    """Base class for every error that aborts a translation run."""


class ParseError(VttTranslateError):
    """The source file is not valid WebVTT."""


class UnsupportedLanguageError(VttTranslateError):
    """The requested language (or language pair) is not supported."""


class WriteError(VttTranslateError):
    """The translated file could not be written."""


class TranslationError(VttTranslateError):
    """The translation service failed or returned an unusable response."""


class AuthError(TranslationError):
    pass


class NetworkError(TranslationError):
    pass


class RateLimitError(TranslationError):
    pass
