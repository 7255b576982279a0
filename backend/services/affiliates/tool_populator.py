"""
Tool Populator
Copies the tool cards of one research trend into the tech_stacks catalog.
"""
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from data.store import Store
from schemas.domain import SignupStatus, TechStackEntry, ToolCard
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_SCORE = 70
DEFAULT_CATEGORY = "Uncategorized"


def current_week_number(today: Optional[date] = None) -> int:
    """Week of the 1-4 content cycle for a calendar date."""
    day = (today or date.today()).day
    return math.ceil(day / 7) % 4 or 4


class ToolPopulator:
    def __init__(self, store: Store):
        self.store = store

    def _path_focus(self, path_id: Optional[str]) -> str:
        if not path_id:
            return DEFAULT_CATEGORY
        path = self.store.get("paths", path_id)
        return (path or {}).get("tech_stack_focus") or DEFAULT_CATEGORY

    def _reuse(self, existing: Dict[str, Any], card: ToolCard, week: int, today: date) -> Dict[str, Any]:
        self.store.update("tech_stacks", existing["id"], {
            "selected_for_week": True,
            "last_used_week": today.isoformat(),
            "week_number": week,
            "tools_detailed_source": card.model_dump(),
        })
        return {
            "name": card.name,
            "status": "reused",
            "has_affiliate_link": bool(existing.get("affiliate_url")),
        }

    def _create(self, card: ToolCard, path_id: Optional[str], category: str, week: int) -> Dict[str, Any]:
        needs_signup = card.has_affiliate_program()
        entry = TechStackEntry(
            path_id=path_id,
            name=card.name,
            category=category,
            description=card.description,
            website_url=card.website,
            pricing_model=card.pricing,
            key_features=card.key_features,
            selected_for_week=True,
            auto_populated=True,
            week_number=week,
            signup_status=SignupStatus.PENDING if needs_signup else SignupStatus.DECLINED,
            affiliate_notes=card.affiliate_program,
            tools_detailed_source=card.model_dump(),
            priority_score=DEFAULT_PRIORITY_SCORE,
        )
        self.store.insert("tech_stacks", entry.to_record())
        return {"name": card.name, "status": "new", "needs_affiliate_signup": needs_signup}

    def populate(self, trend_id: str, week_number: Optional[int] = None,
                 today: Optional[date] = None) -> Dict[str, Any]:
        """
        Upsert every tool card of a trend into the catalog, keyed on (path_id, name).

        A trend is populated at most once; a repeat call is rejected before
        any catalog write. Per-tool failures are collected, not raised.
        """
        if not (trend_id or "").strip():
            raise ValidationError("trend_id is required")
        if week_number is not None and not 1 <= week_number <= 4:
            raise ValidationError("week_number must be between 1 and 4")

        trend = self.store.get("trends", trend_id)
        if not trend:
            raise NotFoundError(f"Trend not found: {trend_id}")
        if trend.get("tools_populated"):
            raise ValidationError("Tools from this research have already been populated")

        cards = trend.get("tools_detailed") or []
        if not cards:
            raise ValidationError("No detailed tools found in this research")

        today = today or date.today()
        week = week_number or current_week_number(today)
        path_id = trend.get("path_id")
        category = self._path_focus(path_id)

        populated: List[Dict[str, Any]] = []
        errors: List[str] = []
        for raw in cards:
            name = (raw.get("name") if isinstance(raw, dict) else None) or "unnamed tool"
            try:
                card = ToolCard.model_validate(raw)
                existing = self.store.find_one("tech_stacks", {"path_id": path_id, "name": card.name})
                if existing:
                    populated.append(self._reuse(existing, card, week, today))
                else:
                    populated.append(self._create(card, path_id, category, week))
            except (HTTPException, ValueError) as e:
                message = e.detail if isinstance(e, HTTPException) else str(e)
                logger.warning(f"Failed to populate {name}: {message}")
                errors.append(f"Error processing {name}: {message}")

        self.store.update("trends", trend_id, {"tools_populated": True, "week_number": week})

        new_tools = [t for t in populated if t["status"] == "new"]
        reused = [t for t in populated if t["status"] == "reused"]
        needs_signup = [t for t in new_tools if t["needs_affiliate_signup"]]
        ready = [t for t in reused if t["has_affiliate_link"]]
        needs_links = [t for t in reused if not t["has_affiliate_link"]]

        next_steps = []
        if needs_signup:
            next_steps.append(f"Sign up for {len(needs_signup)} new affiliate programs")
        if needs_links:
            next_steps.append(f"Add affiliate links for {len(needs_links)} existing tools")
        if ready:
            next_steps.append(f"{len(ready)} tools ready with existing affiliate links")

        logger.info(f"Populated {len(populated)} tools from trend {trend_id} for week {week} "
                    f"({len(errors)} errors)")

        return {
            "success": True,
            "message": f"Populated {len(populated)} tools for Week {week}",
            "summary": {
                "total": len(populated),
                "new_tools": len(new_tools),
                "reused_tools": len(reused),
                "needs_affiliate_signup": len(needs_signup),
                "ready_to_use": len(ready),
                "needs_affiliate_links": len(needs_links),
            },
            "tools": populated,
            "errors": errors,
            "next_steps": next_steps,
        }
