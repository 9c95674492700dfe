"""Deployment-window gating for historical and current-state queries."""

from collections.abc import Sequence

from endur_holdings.core.models import BlockIdentifier, ContractDeployment


def _is_block_number(block_identifier: BlockIdentifier) -> bool:
    return isinstance(block_identifier, int) and not isinstance(block_identifier, bool)


def is_contract_deployed(
    block_identifier: BlockIdentifier,
    deployment_block: int,
    max_block: int | None = None,
) -> bool:
    """
    Decide whether a contract may be read at a point in chain history.

    A contract is not queryable before its deployment block. A contract with a
    ``max_block`` has been superseded: it answers historical queries up to and
    including ``max_block`` but never current-state queries (``latest``,
    ``pending``, ``None`` or any other non-integer identifier), which always go
    to its successor.

    Parameters
    ----------
    block_identifier : int | BlockTag | None
        Block number or current-state sentinel
    deployment_block : int
        First block at which the contract exists
    max_block : int | None
        Last block at which the contract is authoritative

    Returns
    -------
    bool
        True if the contract should be read

    Examples
    --------
    >>> is_contract_deployed(100, deployment_block=50, max_block=200)
    True
    >>> is_contract_deployed("latest", deployment_block=50, max_block=200)
    False

    """
    is_number = _is_block_number(block_identifier)

    if is_number and block_identifier < deployment_block:
        return False

    if max_block is not None and (not is_number or block_identifier > max_block):
        return False

    return True


def is_queryable(block_identifier: BlockIdentifier, deployment: ContractDeployment) -> bool:
    """Apply :func:`is_contract_deployed` to a :class:`ContractDeployment`."""
    return is_contract_deployed(block_identifier, deployment.deployment_block, deployment.max_block)


def select_live_deployment(
    block_identifier: BlockIdentifier,
    deployments: Sequence[ContractDeployment],
) -> ContractDeployment | None:
    """
    Pick the authoritative contract from a succession of versions.

    Parameters
    ----------
    block_identifier : int | BlockTag | None
        Block number or current-state sentinel
    deployments : Sequence[ContractDeployment]
        Versions ordered oldest to newest

    Returns
    -------
    ContractDeployment | None
        Newest queryable version, or None if no version is live

    """
    for deployment in reversed(deployments):
        if is_queryable(block_identifier, deployment):
            return deployment
    return None
