class ImageStreamError(Exception):
    """Base class for errors raised by imagestream."""


class ConfigError(ImageStreamError):
    pass


class MissingCredentialError(ImageStreamError):
    def __init__(self, envvar: str):
        self.envvar = envvar
        super().__init__(f'{envvar} environment variable not set.')


class ProviderUnavailableError(ImageStreamError):
    pass
