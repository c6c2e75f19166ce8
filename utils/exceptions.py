"""
Exception types shared across the EcoBlocks API
"""


class EcoBlocksError(Exception):
    """Base class for application errors"""


class UpstreamError(EcoBlocksError):
    """An external data provider failed, timed out, or returned an unusable payload"""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class InsightGenerationError(EcoBlocksError):
    """The generative model call failed or its output broke the JSON contract"""


class MintError(EcoBlocksError):
    """The credit minting collaborator could not mint"""


class AuthenticationError(EcoBlocksError):
    """A bearer token was rejected by the identity verifier"""
