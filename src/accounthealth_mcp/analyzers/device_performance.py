"""Device performance evaluator."""

from dataclasses import dataclass

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.device import DeviceStat, DeviceType
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource

MIN_DEVICE_CLICKS = 20
BASE_SCORE = 95.0
SPREAD_FACTOR = 0.5
MAX_SPREAD_PENALTY = 45.0

MOBILE_CPA_GAP = 1.5
MOBILE_CPA_CAP = 50.0
DESKTOP_CPA_CAP = 60.0
MOBILE_ROAS_GAP = 0.6
MOBILE_ROAS_CAP = 55.0


@dataclass
class DeviceTotals:
    """Summed metrics for one device across campaigns."""

    device: DeviceType
    clicks: int = 0
    cost: float = 0.0
    conversions: float = 0.0
    conversion_value: float = 0.0

    def add(self, stat: DeviceStat) -> None:
        self.clicks += stat.clicks
        self.cost += stat.cost
        self.conversions += stat.conversions
        self.conversion_value += stat.conversion_value

    @property
    def conversion_rate(self) -> float:
        return self.conversions / self.clicks if self.clicks > 0 else 0.0

    @property
    def cpa(self) -> float:
        return self.cost / self.conversions if self.conversions > 0 else 0.0

    @property
    def roas(self) -> float:
        return self.conversion_value / self.cost if self.cost > 0 else 0.0


def aggregate_devices(stats: list[DeviceStat]) -> dict[DeviceType, DeviceTotals]:
    """Sum stats per device, ignoring rows with an unknown device."""
    totals: dict[DeviceType, DeviceTotals] = {}
    for stat in stats:
        if stat.device == DeviceType.UNKNOWN:
            continue
        totals.setdefault(stat.device, DeviceTotals(stat.device)).add(stat)
    return totals


class DevicePerformanceEvaluator(BaseHealthEvaluator):
    """Conversion-rate spread across devices and mobile/desktop efficiency gaps."""

    category = HealthCategory.DEVICE_PERFORMANCE
    required_sources = (DataSource.DEVICE_STATS,)
    no_data_recommendation = (
        f"Device comparison needs at least two devices with {MIN_DEVICE_CLICKS}+ "
        "clicks and some conversions in the selected period."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        totals = aggregate_devices(snapshot.device_stats)
        eligible = sorted(
            (t for t in totals.values() if t.clicks >= MIN_DEVICE_CLICKS),
            key=lambda t: t.device.value,
        )
        if len(eligible) < 2:
            return self.low_signal(
                f"{len(eligible)} devices with {MIN_DEVICE_CLICKS}+ clicks "
                "(need 2 to compare).",
                self.no_data_recommendation,
                {"devicesAnalyzed": len(eligible), "devicesReported": len(totals)},
            )
        if sum(t.conversions for t in eligible) == 0:
            return self.low_signal(
                f"{len(eligible)} devices with traffic but 0 conversions.",
                self.no_data_recommendation,
                {"devicesAnalyzed": len(eligible), "conversions": 0},
            )

        best = max(eligible, key=lambda t: t.conversion_rate)
        worst = min(eligible, key=lambda t: t.conversion_rate)
        spread = self._pct(
            best.conversion_rate - worst.conversion_rate, best.conversion_rate
        )
        score = BASE_SCORE - min(MAX_SPREAD_PENALTY, spread * SPREAD_FACTOR)

        finding = (
            f"Conversion rate ranges from {worst.conversion_rate * 100:.2f}% "
            f"({worst.device.value.lower()}) to {best.conversion_rate * 100:.2f}% "
            f"({best.device.value.lower()}), a {spread:.0f}% spread across "
            f"{len(eligible)} devices."
        )
        recommendation = (
            f"Review bid adjustments for {worst.device.value.lower()}, the weakest "
            "converting device."
            if spread > 0
            else "Device performance is even. No bid adjustments needed."
        )

        mobile = totals.get(DeviceType.MOBILE)
        desktop = totals.get(DeviceType.DESKTOP)
        if mobile in eligible and desktop in eligible:
            if desktop.cpa > 0 and mobile.cpa > MOBILE_CPA_GAP * desktop.cpa:
                score = min(score, MOBILE_CPA_CAP)
                finding += (
                    f" Mobile CPA {self._format_currency(mobile.cpa)} is "
                    f"{mobile.cpa / desktop.cpa:.1f}x desktop "
                    f"({self._format_currency(desktop.cpa)})."
                )
                recommendation = (
                    "Apply a negative mobile bid adjustment and check the mobile "
                    "landing page experience."
                )
            elif mobile.cpa > 0 and desktop.cpa > MOBILE_CPA_GAP * mobile.cpa:
                score = min(score, DESKTOP_CPA_CAP)
                finding += (
                    f" Desktop CPA {self._format_currency(desktop.cpa)} is "
                    f"{desktop.cpa / mobile.cpa:.1f}x mobile "
                    f"({self._format_currency(mobile.cpa)})."
                )
                recommendation = (
                    "Lower desktop bids or shift budget toward mobile, which "
                    "converts more cheaply."
                )
            elif desktop.roas > 0 and mobile.roas < MOBILE_ROAS_GAP * desktop.roas:
                score = min(score, MOBILE_ROAS_CAP)
                finding += (
                    f" Mobile ROAS {mobile.roas:.2f}x trails desktop "
                    f"{desktop.roas:.2f}x."
                )
                recommendation = (
                    "Reduce mobile bids or use value-based bidding so mobile spend "
                    "follows its lower return."
                )

        return self._check(
            score,
            finding,
            recommendation,
            {
                "devicesAnalyzed": len(eligible),
                "spreadPct": round(spread, 1),
                "devices": {
                    t.device.value: {
                        "clicks": t.clicks,
                        "cost": round(t.cost, 2),
                        "conversions": round(t.conversions, 2),
                        "conversionRate": round(t.conversion_rate * 100, 2),
                        "cpa": round(t.cpa, 2),
                        "roas": round(t.roas, 2),
                    }
                    for t in eligible
                },
            },
        )
