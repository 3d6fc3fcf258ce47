import logging
import numpy as np
import matplotlib.pyplot as plt
from dataclasses import dataclass
from typing import List, Optional
import pandas as pd
from pathlib import Path
from datetime import datetime

from vault_engine.src.access import PermissionSet, Role
from vault_engine.src.clock import ManualClock
from vault_engine.src.constants import HOUR_IN_SECONDS, MAX_UINT256
from vault_engine.src.debt_token import DebtToken
from vault_engine.src.errors import ProtocolError
from vault_engine.src.fixed_point import format_units, parse_units, wdiv, wmul
from vault_engine.src.oracle import MockPriceFeed
from vault_engine.src.vault_ledger import VaultLedger

logger = logging.getLogger(__name__)

ADMIN = "admin"
KEEPER = "keeper"

@dataclass
class SimulationParams:
    initial_price: float = 2000.0  # USD per collateral unit
    price_drift: float = 0.0       # annualized
    price_volatility: float = 0.8  # annualized
    simulation_days: int = 180
    steps_per_day: int = 24  # hourly steps
    num_borrowers: int = 50
    min_open_ratio: float = 1.6
    max_open_ratio: float = 4.0
    zero_liquidation_share: float = 0.2  # of borrowers opening above 250%
    activity_probability: float = 0.3  # chance per step a borrower touches their vault
    random_seed: Optional[int] = None
    experiment_name: str = "default"

class RebalancingSimulation:
    """
    Drives a VaultLedger along a geometric Brownian collateral price path.

    Borrowers open vaults at random ratios, occasionally repay or top up,
    and a keeper with a deep vault liquidates anything below the standard
    ratio. Every step records the global ratio and the rate tier the
    rebalancer picked.
    """

    def __init__(self, params: SimulationParams):
        self.params = params
        self.clock = ManualClock()
        self.feed = MockPriceFeed(self._feed_answer(params.initial_price))
        self.token = DebtToken(PermissionSet())
        self.ledger = VaultLedger(self.token, self.feed, ADMIN, clock=self.clock)
        self.token.permissions.grant(Role.MINTER, self.ledger.address)
        self.token.permissions.grant(Role.BURNER, self.ledger.address)

        self.borrowers: List[str] = []
        self.records: List[dict] = []
        self.price = params.initial_price

        if params.random_seed is not None:
            np.random.seed(params.random_seed)

    @staticmethod
    def _feed_answer(price: float) -> int:
        return int(round(price * 10**8))

    def open_vaults(self):
        # Keeper holds a 10x vault so it has tokens to repay with
        keeper_collateral = 1000
        self.ledger.deposit_collateral(KEEPER, parse_units(keeper_collateral))
        self.ledger.mint(KEEPER, parse_units(round(keeper_collateral * self.price / 10, 2)))

        for i in range(self.params.num_borrowers):
            owner = f"borrower_{i}"
            collateral = round(np.random.uniform(1, 10), 4)
            ratio = np.random.uniform(self.params.min_open_ratio, self.params.max_open_ratio)
            debt = round(collateral * self.price / ratio, 2)

            self.ledger.deposit_collateral(owner, parse_units(collateral))
            self.ledger.mint(owner, parse_units(debt))
            if ratio >= 2.6 and np.random.rand() < self.params.zero_liquidation_share:
                self.ledger.enable_zero_liquidation(owner)
            self.borrowers.append(owner)

        logger.info("Opened %d vaults at price %.2f", len(self.borrowers), self.price)

    def step_price(self):
        """One GBM step: S *= exp((mu - sigma^2 / 2) dt + sigma sqrt(dt) Z)"""
        dt = 1.0 / (365 * self.params.steps_per_day)
        mu, sigma = self.params.price_drift, self.params.price_volatility
        shock = np.random.normal(0, 1)
        self.price *= np.exp((mu - 0.5 * sigma**2) * dt + sigma * np.sqrt(dt) * shock)
        self.feed.update_answer(self._feed_answer(self.price))

    def borrower_activity(self):
        """A random borrower repays 1% of their debt or tops up collateral"""
        if np.random.rand() >= self.params.activity_probability:
            return
        owner = self.borrowers[np.random.randint(len(self.borrowers))]
        debt = self.ledger.get_vault(owner).debt_principal
        repay = min(self.token.balance_of(owner), debt) // 100
        if repay > 0 and np.random.rand() < 0.5:
            self.ledger.burn(owner, repay)
        else:
            self.ledger.deposit_collateral(owner, self.ledger.params.collateral_floor)

    def run_liquidations(self) -> int:
        """Keeper repays up to half of each liquidatable vault's debt"""
        liquidations = 0
        price = parse_units(round(self.price, 8))
        bonus = self.ledger.params.bonus_percent

        for owner in self.borrowers:
            if not self.ledger.is_liquidatable(owner):
                continue
            collateral = self.ledger.get_vault(owner).collateral_amount
            # largest repayment whose reward the vault can still cover
            repay_cap = wdiv(wmul(collateral, price), bonus) * 99 // 100
            repay = min(
                self.ledger.get_accrued_debt(owner) // 2,
                self.token.balance_of(KEEPER),
                repay_cap,
            )
            if repay == 0:
                continue
            try:
                self.ledger.liquidate(KEEPER, owner, repay)
                liquidations += 1
            except ProtocolError as e:
                logger.warning("Liquidation of %s for %s failed: %s", owner, repay, e)
        return liquidations

    def record(self, step: int, liquidations: int):
        global_ratio = self.ledger.get_global_collateral_ratio()
        state = self.ledger.state
        self.records.append({
            "time_days": step / self.params.steps_per_day,
            "price": self.price,
            "global_ratio": np.nan if global_ratio == MAX_UINT256 else float(format_units(global_ratio)),
            "rate_per_second": state.current_rate_per_second,
            "annual_rate_pct": (float(format_units(self.ledger.get_annualized_rate())) - 1) * 100,
            "total_debt": float(format_units(state.total_debt)),
            "total_collateral": float(format_units(state.total_collateral)),
            "liquidations": liquidations,
        })

    def simulate(self) -> pd.DataFrame:
        self.open_vaults()
        total_steps = self.params.simulation_days * self.params.steps_per_day
        step_seconds = 24 * HOUR_IN_SECONDS // self.params.steps_per_day

        for step in range(total_steps):
            self.clock.advance(step_seconds)
            self.step_price()
            self.borrower_activity()
            liquidations = self.run_liquidations()
            self.record(step, liquidations)

        return pd.DataFrame.from_records(self.records)

    def output_dir(self) -> Path:
        output_dir = Path('research/results') / self.params.experiment_name
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir

    def save_results(self, results: pd.DataFrame):
        name = f"vol_{self.params.price_volatility}"
        if self.params.random_seed is not None:
            name += f"_seed_{self.params.random_seed}"
        results.to_csv(self.output_dir() / f"{name}.csv", index=False)

    def plot_results(self, results: pd.DataFrame):
        fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(12, 10), sharex=True)

        ax1.plot(results["time_days"], results["price"], label='Collateral Price')
        ax1.set_ylabel('Price (USD)')
        ax1.set_title('Collateral Price Over Time')
        ax1.legend()
        ax1.grid(True)

        ax2.plot(results["time_days"], results["global_ratio"] * 100, label='Global Ratio', color='green')
        for threshold in (100, 120, 140, 160, 180, 200):
            ax2.axhline(y=threshold, color='r', linestyle='--', alpha=0.2)
        ax2.set_ylabel('Collateral Ratio (%)')
        ax2.set_title('Global Collateral Ratio')
        ax2.legend()
        ax2.grid(True)

        ax3.step(results["time_days"], results["annual_rate_pct"], where='post', label='Annual Rate', color='orange')
        liquidated = results[results["liquidations"] > 0]
        ax3.scatter(liquidated["time_days"], liquidated["annual_rate_pct"], color='red', s=10, label='Liquidations')
        ax3.set_ylabel('Interest Rate (%)')
        ax3.set_xlabel('Time (days)')
        ax3.set_title('Rebalanced Interest Rate')
        ax3.legend()
        ax3.grid(True)

        plt.tight_layout()

        plot_name = f"vol_{self.params.price_volatility}"
        if self.params.random_seed is not None:
            plot_name += f"_seed_{self.params.random_seed}"

        plt.savefig(self.output_dir() / f"{plot_name}.png")
        plt.close()

def compare_volatilities(volatilities: List[float], base_params: SimulationParams):
    """Run the same seed at several volatilities and plot the rate paths together"""
    output_dir = Path('research/results/volatility_comparison')
    output_dir.mkdir(parents=True, exist_ok=True)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 10))

    for volatility in volatilities:
        params = SimulationParams(
            initial_price=base_params.initial_price,
            price_drift=base_params.price_drift,
            price_volatility=volatility,
            simulation_days=base_params.simulation_days,
            steps_per_day=base_params.steps_per_day,
            num_borrowers=base_params.num_borrowers,
            random_seed=base_params.random_seed,
            experiment_name=base_params.experiment_name,
        )
        sim = RebalancingSimulation(params)
        results = sim.simulate()
        sim.save_results(results)

        ax1.plot(results["time_days"], results["global_ratio"] * 100, label=f"σ={volatility}")
        ax2.step(results["time_days"], results["annual_rate_pct"], where='post', label=f"σ={volatility}")
        logger.info(
            "σ=%s: %d liquidations, final rate %.2f%%",
            volatility, results["liquidations"].sum(), results["annual_rate_pct"].iloc[-1],
        )

    ax1.set_ylabel('Global Collateral Ratio (%)')
    ax1.set_title('Global Collateral Ratio Over Time')
    ax1.legend(loc='upper left')
    ax1.grid(True, alpha=0.3)

    ax2.set_ylabel('Interest Rate (%)')
    ax2.set_xlabel('Time (days)')
    ax2.set_title('Interest Rate Over Time')
    ax2.legend(bbox_to_anchor=(1.05, 1), loc='upper left')
    ax2.grid(True, alpha=0.3)

    seed_text = f"Random Seed: {base_params.random_seed}" if base_params.random_seed is not None else "No Seed"
    fig.text(0.02, 0.02, seed_text, fontsize=8, alpha=0.7)

    plt.tight_layout()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    plt.savefig(output_dir / f"volatility_comparison_{timestamp}.png", bbox_inches='tight', dpi=300)
    plt.close()

def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    # ledger internals log every grant and admin change at INFO
    logging.getLogger("vault_engine").setLevel(logging.WARNING)

    base_params = SimulationParams(
        experiment_name="volatility_comparison",
        random_seed=57,
        simulation_days=100,
    )
    compare_volatilities([0.4, 0.8, 1.2], base_params)

    # # single run for testing
    # params = SimulationParams(experiment_name="single_run", random_seed=42)
    # sim = RebalancingSimulation(params)
    # results = sim.simulate()
    # sim.save_results(results)
    # sim.plot_results(results)

if __name__ == "__main__":
    main()
