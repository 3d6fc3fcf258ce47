"""Per-vault interest accrual"""
import logging

from ..constants import MAX_UINT256, WAD, YEAR_IN_SECONDS
from ..errors import FixedPointError
from ..fixed_point import rpow, wmul
from ..state.protocol_config import GlobalState
from ..state.vault import Vault

logger = logging.getLogger(__name__)

def compound_interest(rate_per_second: int, time_elapsed: int) -> int:
    """Growth factor rate_per_second ** time_elapsed, WAD scaled"""
    if time_elapsed <= 0:
        return WAD
    return rpow(rate_per_second, time_elapsed)

def annualized_rate(rate_per_second: int) -> int:
    """Display conversion of a per-second rate to its yearly growth factor.

    Saturates at MAX_UINT256 for rates whose yearly growth leaves the
    uint256 range (roughly anything above 1.000004 per second).
    """
    try:
        return compound_interest(rate_per_second, YEAR_IN_SECONDS)
    except FixedPointError:
        return MAX_UINT256

def pending_debt(vault: Vault, rate_per_second: int, now: int) -> int:
    """Debt including interest up to `now`, without touching the vault"""
    if vault.debt_principal == 0:
        return 0
    elapsed = now - vault.last_accrual_time
    return wmul(vault.debt_principal, compound_interest(rate_per_second, elapsed))

def accrue(vault: Vault, state: GlobalState, now: int) -> int:
    """Fold pending interest into the vault and the aggregate debt.

    Returns the interest added. Accruing twice at the same timestamp adds
    nothing the second time; a timestamp behind the vault's last accrual is
    treated as no elapsed time.
    """
    if now <= vault.last_accrual_time:
        return 0

    interest = 0
    if vault.debt_principal > 0:
        new_debt = pending_debt(vault, state.current_rate_per_second, now)
        interest = new_debt - vault.debt_principal
        vault.debt_principal = new_debt
        state.update_totals(debt_change=interest)
        logger.debug(
            "Accrued %s interest on %s over %ss",
            interest, vault.owner, now - vault.last_accrual_time,
        )

    vault.last_accrual_time = now
    return interest
