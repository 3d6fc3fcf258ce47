"""Custom errors for the vault engine"""

class ProtocolError(Exception):
    """Base error class for protocol errors"""
    pass

class FixedPointError(ProtocolError):
    """Error for arithmetic overflow or division by zero"""
    pass

class InvalidPriceError(ProtocolError):
    """Error for invalid or stale price data"""
    pass

class InputValidationError(ProtocolError):
    """Error for zero amounts and sub-floor collateral"""
    pass

class InsufficientCollateralError(ProtocolError):
    """Error for a ratio that would fall below the active threshold"""
    pass

class InsufficientBalanceError(ProtocolError):
    """Error for token balances and debt bounds"""
    pass

class StateGuardError(ProtocolError):
    """Error for operations not allowed in the current state"""
    pass

class ZeroLiquidationVaultError(StateGuardError):
    """Liquidation attempted on a protected vault"""
    pass

class VaultNotUndercollateralisedError(StateGuardError):
    """Liquidation attempted on a healthy vault"""
    pass

class EnforcedPauseError(StateGuardError):
    """Operation attempted while the system is paused"""
    pass

class ExpectedPauseError(StateGuardError):
    """Unpause attempted while the system is running"""
    pass

class ReentrancyError(StateGuardError):
    """Nested call into the ledger while an operation is in flight"""
    pass

class AccessControlError(ProtocolError):
    """Caller lacks the required role"""
    pass

class ConfigurationError(ProtocolError):
    """Parameter outside its allowed bounds"""
    pass
