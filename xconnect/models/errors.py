class BaseUrlMissingError(Exception):
    def __init__(
        self,
        message="Base URL required. Pass base_url or set \033[1mXCONNECT_BASE_URL\033[22m.",
    ):
        self.message = message
        super().__init__(self.message)


class InvalidConfigError(Exception):
    def __init__(self, message="Invalid client configuration."):
        self.message = message
        super().__init__(self.message)
