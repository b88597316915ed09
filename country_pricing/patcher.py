"""Rewrite the page's default USD price fragments with a region's prices.

Every fragment is matched by its default-currency literal, so once a table
has been applied the literals are gone and applying it again changes nothing.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from country_pricing.document import DocumentIndex
from country_pricing.models import PriceEntry, PriceMarker, PriceTable, format_amount

log = logging.getLogger(__name__)

PRICE_HIGHLIGHT = 'span[style*="color: rgb(182, 185, 59)"]'
CUSTOM_SAVINGS_TEXT = "Custom pricing available!"


@dataclass(frozen=True)
class PlanLayout:
    """Where a plan's prices live in the default page."""
    plan: str
    anchor_phrase: str
    main_fragment: str
    monthly_fragment: str
    savings_sentence: str
    anchor_tag: str = "h3"
    price_selector: Optional[str] = PRICE_HIGHLIGHT


DEFAULT_LAYOUTS = (
    PlanLayout(
        plan="branding",
        anchor_phrase="Branding",
        main_fragment="USD 897",
        monthly_fragment="USD 448/month",
        savings_sentence="SAVE USD 448/mo for 2 months!",
    ),
    PlanLayout(
        plan="brand_video",
        anchor_phrase="Brand+video",
        main_fragment="USD 1279",
        monthly_fragment="USD 448/month",
        savings_sentence="SAVE USD 648/mo for 2 months!",
    ),
    PlanLayout(
        plan="video",
        anchor_phrase="video USD 997",
        main_fragment="USD 997",
        monthly_fragment="USD 498/month",
        savings_sentence="SAVE USD 498/mo for 2 months!",
    ),
)


def main_price_text(entry: PriceEntry) -> str:
    if entry.main_price is PriceMarker.ENTERPRISE:
        return PriceMarker.ENTERPRISE.value
    return f"{entry.symbol}{format_amount(entry.main_price)}"


def monthly_price_text(entry: PriceEntry) -> str:
    if entry.monthly_price is PriceMarker.CONTACT:
        return PriceMarker.CONTACT.value
    return f"{entry.symbol}{format_amount(entry.monthly_price)}/month"


def savings_text(entry: PriceEntry) -> str:
    if entry.savings is PriceMarker.CUSTOM:
        return CUSTOM_SAVINGS_TEXT
    return f"SAVE {entry.symbol}{format_amount(entry.savings)}/mo for 2 months!"


@dataclass
class PatchResult:
    region: str
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)

    def summary(self) -> str:
        return f"{self.region}: {len(self.applied)} applied, {len(self.skipped)} skipped"


class TextPatcher:
    def __init__(self, document: DocumentIndex, layouts=DEFAULT_LAYOUTS):
        self.document = document
        self.layouts = tuple(layouts)

    def apply_table(self, table: PriceTable) -> PatchResult:
        """Patch every plan the table prices. Missing targets are skipped per field."""
        log.info("Applying pricing updates for %s (%s)", table.region, table.currency)
        result = PatchResult(table.region)
        for layout in self.layouts:
            entry = table.entries.get(layout.plan)
            if entry is None:
                continue
            self._patch_plan(layout, entry, result)
        log.info("Pricing updates completed: %s", result.summary())
        return result

    def _record(self, result: PatchResult, plan: str, part: str, ok: bool):
        target = f"{plan}.{part}"
        if ok:
            result.applied.append(target)
        else:
            log.debug("Patch target not found: %s", target)
            result.skipped.append(target)

    def _patch_plan(self, layout: PlanLayout, entry: PriceEntry, result: PatchResult):
        doc = self.document
        anchor = doc.find_first_containing(layout.anchor_phrase, layout.anchor_tag)
        if anchor is None:
            self._record(result, layout.plan, "main_price", False)
            self._record(result, layout.plan, "monthly_price", False)
        else:
            price_node = doc.select_first(layout.price_selector, anchor) if layout.price_selector else None
            ok = doc.replace_fragment(price_node or anchor, layout.main_fragment, main_price_text(entry))
            self._record(result, layout.plan, "main_price", ok)
            ok = doc.replace_fragment(anchor, layout.monthly_fragment, monthly_price_text(entry))
            self._record(result, layout.plan, "monthly_price", ok)

        save_node = doc.find_first_containing(layout.savings_sentence)
        ok = doc.replace_fragment(save_node, layout.savings_sentence, savings_text(entry))
        self._record(result, layout.plan, "savings", ok)
