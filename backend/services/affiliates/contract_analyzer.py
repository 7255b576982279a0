"""
Contract Analyzer
Extracts structured affiliate terms from a pasted contract and records them.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from data.store import Store, utc_now_iso
from integrations.anthropic_client import LLMClient
from schemas.domain import ContractAnalysis, MonitoringAlert, SignupStatus
from services.ai import prompts
from services.ai.response_extractor import extract_contract_analysis
from utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def contract_record(tech_stack_id: str, analysis: ContractAnalysis, contract_text: str,
                    contract_url: Optional[str] = None,
                    affiliate_network: Optional[str] = None,
                    tracking_id: Optional[str] = None) -> Dict[str, Any]:
    """Flatten an analysis into an affiliate_contracts row."""
    commission = analysis.commission_structure
    payment = analysis.payment_terms
    restrictions = analysis.restrictions
    review = analysis.analysis
    monitoring = analysis.monitoring_setup
    analyzed_at = utc_now_iso()

    return {
        "tech_stack_id": tech_stack_id,
        "contract_text": contract_text,
        "contract_url": contract_url,
        "affiliate_network": affiliate_network,
        "tracking_id": tracking_id,

        "commission_type": commission.type,
        "commission_rate_primary": commission.primary_rate,
        "commission_rate_recurring": commission.recurring_rate,
        "commission_tiers": [tier.model_dump() for tier in commission.tiers],
        "cookie_duration_days": commission.cookie_duration_days,

        "payment_frequency": payment.frequency,
        "payment_threshold": payment.threshold,
        "payment_methods": payment.methods,
        "payout_delay_days": payment.payout_delay_days,

        "geographic_restrictions": restrictions.geographic,
        "traffic_restrictions": restrictions.traffic,
        "promotional_restrictions": restrictions.promotional,
        "compliance_requirements": restrictions.compliance,
        "prohibited_keywords": restrictions.prohibited_keywords,

        "ai_analysis_summary": review.summary,
        "ai_rating": review.rating,
        "ai_pros": review.pros,
        "ai_cons": review.cons,
        "ai_recommendations": review.recommendations,
        "ai_risk_level": review.risk_level.value,

        "performance_benchmarks": monitoring.benchmarks,
        "alert_thresholds": monitoring.alert_thresholds,
        "monitoring_frequency": monitoring.recommended_frequency,

        "analyzed_at": analyzed_at,
        "last_reviewed_at": analyzed_at,
    }


def action_item_alerts(tech_stack_id: str, contract_id: str, items: List[str]) -> List[MonitoringAlert]:
    return [
        MonitoringAlert(
            tech_stack_id=tech_stack_id,
            contract_id=contract_id,
            description=item,
            ai_recommendations=[item],
            suggested_actions=[item],
        )
        for item in items
    ]


class ContractAnalyzer:
    def __init__(self, store: Store, llm: LLMClient):
        self.store = store
        self.llm = llm

    def analyze(self, tech_stack_id: str, contract_text: str,
                contract_url: Optional[str] = None,
                affiliate_network: Optional[str] = None,
                tracking_id: Optional[str] = None,
                today: Optional[date] = None) -> Dict[str, Any]:
        """
        Analyze a contract for a catalog entry.

        Side effects on success: one affiliate_contracts row, one alert per
        action item, and the catalog entry flipped to signup_status=active.
        Nothing is written when the model call or the parse fails.
        """
        if not (tech_stack_id or "").strip() or not (contract_text or "").strip():
            raise ValidationError("tech_stack_id and contract_text are required")

        tool = self.store.get("tech_stacks", tech_stack_id)
        if not tool:
            raise NotFoundError(f"Tech stack not found: {tech_stack_id}")

        tool_name = tool.get("name", "Unknown tool")
        logger.info(f"Analyzing {affiliate_network or 'direct'} contract for {tool_name}")

        completion = self.llm.complete(
            prompts.CONTRACT_SYSTEM_PROMPT,
            prompts.contract_prompt(tool_name, tool.get("website_url") or "", contract_text, affiliate_network),
            prompts.CONTRACT_TEMPERATURE,
        )
        analysis = extract_contract_analysis(completion)

        contract = self.store.insert("affiliate_contracts", contract_record(
            tech_stack_id, analysis, contract_text, contract_url, affiliate_network, tracking_id,
        ))

        alerts = action_item_alerts(tech_stack_id, contract["id"], analysis.key_action_items)
        if alerts:
            self.store.insert_many("affiliate_monitoring_alerts", [a.model_dump() for a in alerts])

        self.store.update("tech_stacks", tech_stack_id, {
            "signup_status": SignupStatus.ACTIVE.value,
            "signup_date": (today or date.today()).isoformat(),
        })
        logger.info(f"Saved contract {contract['id']} for {tool_name} with {len(alerts)} alerts")

        review = analysis.analysis
        return {
            "success": True,
            "message": "Contract analyzed successfully",
            "contract_id": contract["id"],
            "analysis": {
                "summary": review.summary,
                "rating": review.rating,
                "risk_level": review.risk_level.value,
                "pros_count": len(review.pros),
                "cons_count": len(review.cons),
                "recommendations_count": len(review.recommendations),
                "action_items_count": len(analysis.key_action_items),
            },
        }
