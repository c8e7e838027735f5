class Streak:
    def __init__(self):
        self.streak = 0
        self.win_run = 0
        self.loss_run = 0
        self.longest_win_streak = 0
        self.longest_loss_streak = 0

    def process(self, pnl):
        """
        Processes a trade result and updates the streak.

        Args:
            pnl (float): Realized P&L of the trade, fed in exit-time order.

        A breakeven trade (pnl exactly 0) neither extends nor resets either run.
        """
        if pnl > 0:
            self.win_run += 1
            self.loss_run = 0
            self.streak = self.win_run
            self.longest_win_streak = max(self.longest_win_streak, self.win_run)
        elif pnl < 0:
            self.loss_run += 1
            self.win_run = 0
            self.streak = -self.loss_run
            self.longest_loss_streak = max(self.longest_loss_streak, self.loss_run)

    @classmethod
    def from_pnls(cls, pnls):
        tracker = cls()
        for pnl in pnls:
            tracker.process(pnl)
        return tracker

    def describe(self):
        """Short label for the current streak, e.g. "3W", "2L" or "-"."""
        if self.streak > 0:
            return f"{self.streak}W"
        if self.streak < 0:
            return f"{abs(self.streak)}L"
        return "-"
