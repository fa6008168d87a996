"""Daily loss limit for VWAPBot strategies."""

from __future__ import annotations

from loguru import logger


class DailyLossGuard:
    """Stops new trading once the session's loss budget is spent.

    Two budgets are supported and may be combined:

    * ``max_loss_usd`` - a fixed dollar cap compared against the loss
      accumulated through :meth:`record_loss`.
    * ``max_loss_pct`` - a percentage of the cash balance captured by
      :meth:`start_session`, compared against the balance passed to
      :meth:`can_trade`.

    The accumulator returns to zero at the start of every session.
    """

    def __init__(
        self,
        max_loss_usd: float | None = None,
        max_loss_pct: float | None = None,
    ) -> None:
        if max_loss_usd is None and max_loss_pct is None:
            raise ValueError("DailyLossGuard needs max_loss_usd or max_loss_pct")
        self.max_loss_usd = max_loss_usd
        self.max_loss_pct = max_loss_pct
        self.daily_loss: float = 0.0
        self.session_start_balance: float | None = None
        self.sessions_started: int = 0

    # ── Session lifecycle ─────────────────────────────────────────────────────

    def start_session(self, start_balance: float | None = None) -> None:
        """Reset the accumulator and capture the session-start balance."""
        if self.daily_loss:
            logger.info("New session, resetting daily loss (was {:.2f})", self.daily_loss)
        self.daily_loss = 0.0
        self.session_start_balance = start_balance
        self.sessions_started += 1
        if start_balance is not None and self.max_loss_pct is not None:
            logger.debug(
                "Session start balance={:.2f} | max loss={:.2f}",
                start_balance, self.balance_loss_limit,
            )

    def record_loss(self, amount: float) -> None:
        """Add a realised loss estimate (positive number) to today's total."""
        self.daily_loss += amount
        logger.debug("Daily loss updated: {:.2f}", self.daily_loss)

    # ── Checks ────────────────────────────────────────────────────────────────

    @property
    def balance_loss_limit(self) -> float:
        """Dollar loss allowed against the session-start balance."""
        if self.session_start_balance is None or self.max_loss_pct is None:
            return 0.0
        return self.session_start_balance * (self.max_loss_pct / 100.0)

    def can_trade(self, current_balance: float | None = None) -> tuple[bool, str]:
        """Return ``(True, "")`` while budget remains, else ``(False, reason)``."""
        if self.max_loss_usd is not None and self.daily_loss >= self.max_loss_usd:
            return False, (
                f"Daily loss {self.daily_loss:.2f} reached limit {self.max_loss_usd:.2f}"
            )

        if (
            self.max_loss_pct is not None
            and self.session_start_balance is not None
            and current_balance is not None
        ):
            drawdown = self.session_start_balance - current_balance
            limit = self.balance_loss_limit
            if drawdown >= limit:
                return False, (
                    f"Session drawdown {drawdown:.2f} reached "
                    f"{self.max_loss_pct}% limit {limit:.2f}"
                )

        return True, ""

    def get_status(self) -> dict:
        return {
            "daily_loss": self.daily_loss,
            "max_loss_usd": self.max_loss_usd,
            "max_loss_pct": self.max_loss_pct,
            "session_start_balance": self.session_start_balance,
            "balance_loss_limit": self.balance_loss_limit,
        }
