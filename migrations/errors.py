"""
Migration error taxonomy

Every failure a migration can surface is a DeploymentError. The directive
never catches these; the runner reports them and exits non-zero.
"""


class DeploymentError(Exception):
    """Base class for all migration failures."""

    pass


class ConfigurationError(DeploymentError):
    """Raised when an environment setting cannot be parsed."""

    pass


class ArtifactNotFound(DeploymentError):
    """Raised when a contract has no usable compiled artifact."""

    pass


class NetworkUnavailable(DeploymentError):
    """Raised when the RPC endpoint cannot be reached."""

    pass


class TransactionFailure(DeploymentError):
    """Raised when a deployment transaction is rejected, reverts or never confirms."""

    pass


class InsufficientFunds(DeploymentError):
    """Raised when the signing account cannot pay for a deployment."""

    pass
