"""
Vault Ledger for the vault engine.

Owns every vault and the aggregate totals, and exposes the user operations
(deposit, withdraw, mint, burn, zero-liquidation toggles, liquidation), the
owner-gated admin surface and the read queries.

Every user operation runs inside `_operation`, which:
1. rejects the call while paused or while another operation is in flight
2. snapshots the target vault and the global state
3. accrues interest on the target vault, then rebalances the rate if due
4. runs the operation's validation and effects, then its external calls
5. restores the snapshot and drops buffered notifications on any exception,
   or on success releases the guard and then publishes them
"""
import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from .access import PermissionSet, Role
from .clock import system_clock
from .constants import MAX_UINT256
from .debt_token import DebtToken
from .errors import (
    EnforcedPauseError,
    ExpectedPauseError,
    InputValidationError,
    InsufficientBalanceError,
    InsufficientCollateralError,
    ReentrancyError,
)
from .events import (
    CollateralDeposited,
    CollateralLiquidated,
    CollateralWithdrawn,
    DebtBurned,
    DebtMinted,
    EventLog,
    OwnershipTransferred,
    ParameterUpdated,
    Paused,
    Unpaused,
    ZeroLiquidationDisabled,
    ZeroLiquidationEnabled,
)
from .instructions.accrue_interest import accrue, annualized_rate, pending_debt
from .instructions.collateral_ratio import ratio_of
from .instructions.liquidate import apply_liquidation, check_liquidation, is_liquidatable
from .instructions.rebalance_interest_rate import global_collateral_ratio, maybe_rebalance
from .native_asset import NativeAsset
from .oracle import PriceOracle, normalized_price
from .state.protocol_config import (
    GlobalState,
    ProtocolParameters,
    SystemStatus,
    validate_rate_per_second,
)
from .state.vault import Vault, VaultStatus

logger = logging.getLogger(__name__)


class VaultLedger:
    """
    Collateralized debt positions against a single collateral asset.

    Args:
        token: debt token; this ledger's `address` needs MINTER and BURNER
        oracle: collateral price feed
        owner: account granted the ADMIN role
        native: custody of the collateral asset
        params: initial parameters, defaults from constants
        clock: callable returning the current timestamp in seconds
        address: identity this ledger presents to the token
    """

    def __init__(
        self,
        token: DebtToken,
        oracle: PriceOracle,
        owner: str,
        native: Optional[NativeAsset] = None,
        params: Optional[ProtocolParameters] = None,
        clock: Callable[[], int] = system_clock,
        address: str = "vault_ledger",
        permissions: Optional[PermissionSet] = None,
    ):
        self.token = token
        self.oracle = oracle
        self.native = native or NativeAsset()
        self.params = params or ProtocolParameters()
        self.clock = clock
        self.address = address

        self.owner = owner
        self.permissions = permissions or PermissionSet()
        self.permissions.grant(Role.ADMIN, owner)

        self.state = GlobalState(last_rebalance_time=clock())
        self.vaults: Dict[str, Vault] = {}
        self.events = EventLog()

        self._pending_events: List[object] = []
        self._entered = False

    # --- Operation plumbing ---

    def _price(self) -> int:
        return normalized_price(self.oracle)

    def _ratio(self, collateral_amount: int, debt: int) -> int:
        if debt == 0:
            return MAX_UINT256
        return ratio_of(collateral_amount, debt, self._price())

    def _emit(self, event) -> None:
        self._pending_events.append(event)

    @contextmanager
    def _operation(self, owner: str):
        """Accrue, rebalance and run one atomic operation against `owner`'s vault"""
        if self.state.status is SystemStatus.PAUSED:
            raise EnforcedPauseError("EnforcedPause")
        if self._entered:
            raise ReentrancyError("Reentrant call")

        self._entered = True
        existed = owner in self.vaults
        vault = self.vaults.setdefault(owner, Vault(owner=owner))
        vault_snapshot = replace(vault)
        state_snapshot = replace(self.state)
        self._pending_events = []

        try:
            now = self.clock()
            accrue(vault, self.state, now)
            rate_change = maybe_rebalance(self.state, self.params, self.oracle, now)
            if rate_change is not None:
                self._emit(rate_change)
            yield vault
        except Exception:
            if existed:
                self.vaults[owner] = vault_snapshot
            else:
                del self.vaults[owner]
            self.state = state_snapshot
            self._pending_events = []
            raise
        finally:
            self._entered = False

        # subscribers may call back into the ledger once the guard is released
        events, self._pending_events = self._pending_events, []
        self.events.publish(events)

    # --- Vault operations ---

    def deposit_collateral(self, caller: str, amount: int) -> None:
        """Lock `amount` of collateral in the caller's vault, creating it if needed"""
        with self._operation(caller) as vault:
            if amount <= 0:
                raise InputValidationError("Amount must be > 0")
            if vault.collateral_amount + amount < self.params.collateral_floor:
                raise InputValidationError("Collateral below floor")

            vault.add_collateral(amount)
            self.state.update_totals(collateral_change=amount)

            self.native.receive(caller, amount)
            self._emit(CollateralDeposited(caller, amount))
            logger.debug("%s deposited %s collateral", caller, amount)

    def withdraw_collateral(self, caller: str, amount: int) -> None:
        """
        Release collateral back to the caller.

        The collateral floor only applies to a non-zero remainder, so a vault
        without debt can always be emptied completely.
        """
        with self._operation(caller) as vault:
            if amount <= 0:
                raise InputValidationError("Amount must be > 0")
            if amount > vault.collateral_amount:
                raise InputValidationError("Not enough collateral to withdraw")

            remaining = vault.collateral_amount - amount
            if 0 < remaining < self.params.collateral_floor:
                raise InputValidationError("Remaining collateral below floor")

            threshold = self.params.threshold_for(vault.zero_liquidation)
            if self._ratio(remaining, vault.debt_principal) < threshold:
                raise InsufficientCollateralError(
                    "Withdrawing would cause debt to be undercollateralised"
                )

            vault.remove_collateral(amount)
            self.state.update_totals(collateral_change=-amount)

            self.native.pay(caller, amount)
            self._emit(CollateralWithdrawn(caller, amount))
            logger.debug("%s withdrew %s collateral", caller, amount)

    def mint(self, caller: str, amount: int) -> None:
        """Borrow `amount` of the debt token against the caller's collateral"""
        with self._operation(caller) as vault:
            if amount <= 0:
                raise InputValidationError("Amount must be > 0")

            threshold = self.params.threshold_for(vault.zero_liquidation)
            new_debt = vault.debt_principal + amount
            if self._ratio(vault.collateral_amount, new_debt) < threshold:
                raise InsufficientCollateralError("Not enough collateral")

            vault.add_debt(amount)
            self.state.update_totals(debt_change=amount)

            self.token.mint(self.address, caller, amount)
            self._emit(DebtMinted(caller, amount))
            logger.debug("%s minted %s", caller, amount)

    def burn(self, caller: str, amount: int) -> None:
        """Repay `amount` of the caller's own debt with their tokens"""
        with self._operation(caller) as vault:
            if amount <= 0:
                raise InputValidationError("Amount must be > 0")
            if amount > vault.debt_principal:
                raise InsufficientBalanceError("Not enough debt")
            if self.token.balance_of(caller) < amount:
                raise InsufficientBalanceError("Insufficient token balance")

            vault.remove_debt(amount)
            self.state.update_totals(debt_change=-amount)

            self.token.burn(self.address, caller, amount)
            self._emit(DebtBurned(caller, amount))
            logger.debug("%s burned %s", caller, amount)

    def enable_zero_liquidation(self, caller: str) -> None:
        with self._operation(caller) as vault:
            ratio = self._ratio(vault.collateral_amount, vault.debt_principal)
            if ratio < self.params.zero_liquidation_ratio:
                raise InsufficientCollateralError("Not enough collateral")

            vault.zero_liquidation = True
            self._emit(ZeroLiquidationEnabled(caller))

    def disable_zero_liquidation(self, caller: str) -> None:
        with self._operation(caller) as vault:
            ratio = self._ratio(vault.collateral_amount, vault.debt_principal)
            if ratio < self.params.standard_ratio:
                raise InsufficientCollateralError("Not enough collateral")

            vault.zero_liquidation = False
            self._emit(ZeroLiquidationDisabled(caller))

    def liquidate(self, liquidator: str, owner: str, repay_amount: int) -> int:
        """
        Repay part of an undercollateralised vault's debt in exchange for its
        collateral plus the liquidation bonus.

        Returns:
            collateral paid to the liquidator
        """
        with self._operation(owner) as vault:
            reward = check_liquidation(vault, repay_amount, self._price(), self.params)
            if self.token.balance_of(liquidator) < repay_amount:
                raise InsufficientBalanceError("Insufficient token balance")

            apply_liquidation(vault, self.state, repay_amount, reward)

            self.token.burn(self.address, liquidator, repay_amount)
            self.native.pay(liquidator, reward)
            self._emit(CollateralLiquidated(owner, liquidator, repay_amount, reward))
            logger.info(
                "%s liquidated %s: repaid %s, seized %s collateral",
                liquidator, owner, repay_amount, reward,
            )
        return reward

    # --- Read queries ---

    def get_vault(self, owner: str) -> Vault:
        """Copy of the stored vault; debt excludes interest not yet accrued"""
        vault = self.vaults.get(owner)
        return replace(vault) if vault else Vault(owner=owner)

    def get_accrued_debt(self, owner: str) -> int:
        vault = self.vaults.get(owner)
        if vault is None:
            return 0
        return pending_debt(vault, self.state.current_rate_per_second, self.clock())

    def get_collateral_ratio(self, owner: str) -> int:
        vault = self.get_vault(owner)
        return self._ratio(vault.collateral_amount, self.get_accrued_debt(owner))

    def get_annualized_rate(self) -> int:
        return annualized_rate(self.state.current_rate_per_second)

    def get_global_collateral_ratio(self) -> int:
        if self.state.total_debt == 0:
            return MAX_UINT256
        return global_collateral_ratio(self.state, self._price())

    def is_liquidatable(self, owner: str) -> bool:
        vault = self.get_vault(owner)
        debt = self.get_accrued_debt(owner)
        if debt == 0:
            return False
        return is_liquidatable(vault, debt, self._price(), self.params)

    def vault_status(self, owner: str) -> VaultStatus:
        return self.get_vault(owner).status

    # --- Admin ---

    def _admin_update(self, caller: str, events: List[object]) -> None:
        self.events.publish(events)
        for event in events:
            logger.info("Admin %s: %s", caller, event)

    def pause(self, caller: str) -> None:
        self.permissions.require(Role.ADMIN, caller)
        if self.state.status is SystemStatus.PAUSED:
            raise EnforcedPauseError("EnforcedPause")
        self.state.status = SystemStatus.PAUSED
        self._admin_update(caller, [Paused(caller)])

    def unpause(self, caller: str) -> None:
        self.permissions.require(Role.ADMIN, caller)
        if self.state.status is SystemStatus.RUNNING:
            raise ExpectedPauseError("ExpectedPause")
        self.state.status = SystemStatus.RUNNING
        self._admin_update(caller, [Unpaused(caller)])

    def _set_params(self, caller: str, **changes) -> None:
        self.permissions.require(Role.ADMIN, caller)
        # replace() reruns ProtocolParameters validation
        new_params = replace(self.params, **changes)
        events = [
            ParameterUpdated(name, getattr(self.params, name), value)
            for name, value in changes.items()
        ]
        self.params = new_params
        self._admin_update(caller, events)

    def set_collateral_floor(self, caller: str, floor: int) -> None:
        self._set_params(caller, collateral_floor=floor)

    def set_ratios(self, caller: str, standard_ratio: int, zero_liquidation_ratio: int) -> None:
        self._set_params(
            caller,
            standard_ratio=standard_ratio,
            zero_liquidation_ratio=zero_liquidation_ratio,
        )

    def set_bonus_percent(self, caller: str, bonus_percent: int) -> None:
        self._set_params(caller, bonus_percent=bonus_percent)

    def set_rebalance_interval(self, caller: str, interval: int) -> None:
        self._set_params(caller, rebalance_interval=interval)

    def set_rate_per_second(self, caller: str, rate: int) -> None:
        """Override the system rate; vaults pick it up at their next accrual"""
        self.permissions.require(Role.ADMIN, caller)
        validate_rate_per_second(rate)
        old_rate = self.state.current_rate_per_second
        self.state.current_rate_per_second = rate
        self._admin_update(caller, [ParameterUpdated("rate_per_second", old_rate, rate)])

    def set_rebalancing_enabled(self, caller: str, enabled: bool) -> None:
        self.permissions.require(Role.ADMIN, caller)
        old_value = self.state.rebalancing_enabled
        self.state.rebalancing_enabled = bool(enabled)
        self._admin_update(
            caller, [ParameterUpdated("rebalancing_enabled", old_value, bool(enabled))]
        )

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.permissions.require(Role.ADMIN, caller)
        if not new_owner:
            raise InputValidationError("New owner is the empty account")
        self.permissions.revoke(Role.ADMIN, self.owner)
        self.permissions.grant(Role.ADMIN, new_owner)
        previous_owner, self.owner = self.owner, new_owner
        self._admin_update(caller, [OwnershipTransferred(previous_owner, new_owner)])
