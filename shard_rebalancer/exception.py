from click import ClickException


class ClusterClientError(Exception):
    """
    Any failed operation against the cluster management endpoint.
    """

    def __init__(self, message: str, url: str = None):
        self.url = url
        super().__init__(message)


class TransportError(ClusterClientError):
    """
    Connection failure, timeout, or unsuccessful HTTP status while reading.
    """

    pass


class DecodeError(ClusterClientError):
    """
    The endpoint answered, but the response body was malformed or unexpected.
    """

    pass


class SettingsApplyError(ClusterClientError):
    """
    Writing transient cluster settings failed.
    """

    pass


class ConfigurationError(ClickException):
    pass
