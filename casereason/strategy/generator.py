"""
Strategy Generator.

Produces candidate defence strategies from a charge, the evidence graph
and the disclosure status, even when the bundle is thin or disclosure is
incomplete.

Strategy is a reasoned plan under uncertainty. Each candidate is
appended only when its preconditions hold; two fallbacks guarantee that
at least two strategies always come back.

Provisional is recomputed on every call from readiness and disclosure
and is never carried over from an earlier run.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..disclosure import DisclosureStatus
from ..domain import EvidenceGraph
from ..evidence import EvidenceType
from ..validation import is_thin_bundle


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

MIN_STRATEGIES = 2

SECTION_PATTERN = re.compile(r"\bs(?:ection)?\s*(\d+)", re.IGNORECASE)

VIOLENT_SECTIONS = ("18", "20", "47")
VIOLENT_TERMS = ("assault", "grievous", "bodily harm")

# Next step down the s18 -> s20 -> s47 ladder
DOWNGRADE_LADDER = {"18": "s20", "20": "s47"}


# =============================================================================
# INPUTS
# =============================================================================

class InterviewStance(Enum):
    NO_COMMENT = "no_comment"
    ANSWERED = "answered"
    SILENT = "silent"


@dataclass(frozen=True)
class Charge:
    """A charge descriptor such as Charge("s18 OAPA 1861")."""
    offence: str
    section: Optional[str] = None
    description: Optional[str] = None

    @property
    def resolved_section(self) -> str:
        return self.section or extract_section(self.offence)

    @property
    def is_violent(self) -> bool:
        if self.resolved_section in VIOLENT_SECTIONS:
            return True
        offence = (self.offence or "").lower()
        return any(term in offence for term in VIOLENT_TERMS)


def extract_section(text: Optional[str]) -> str:
    """
    Section number from an offence string, or "" when there is none.

    >>> extract_section("s18 OAPA 1861")
    '18'
    """
    if not text:
        return ""
    match = SECTION_PATTERN.search(text)
    return match.group(1) if match else ""


def _coerce_stance(
    stance: Union[InterviewStance, str, None],
) -> Optional[InterviewStance]:
    if stance is None or isinstance(stance, InterviewStance):
        return stance
    try:
        return InterviewStance(stance)
    except ValueError:
        return None


# =============================================================================
# STRATEGY
# =============================================================================

@dataclass(frozen=True)
class Strategy:
    id: str
    title: str
    theory: str
    when_to_use: str
    risks: tuple[str, ...]
    immediate_actions: tuple[str, ...]
    disclosure_dependency: bool
    downgrade_target: Optional[str] = None
    provisional: bool = True


# =============================================================================
# CANDIDATES
# =============================================================================

def _intent_downgrade(section: str, thin: bool, stance, provisional: bool) -> Strategy:
    if thin:
        support = "Note: This analysis is provisional pending full disclosure and evidence review."
    else:
        support = (
            "Case law supports this distinction where intent cannot be clearly "
            "established from the circumstances."
        )
    if stance is InterviewStance.NO_COMMENT:
        interview = (
            "A no comment interview preserves the defendant's position and prevents "
            "the prosecution from inferring intent from admissions or explanations."
        )
    elif stance is InterviewStance.ANSWERED:
        interview = (
            "Any admissions made in interview must be carefully assessed for whether "
            "they support specific intent or merely recklessness."
        )
    else:
        interview = ""

    if section == "18":
        title = "Intent Downgrade (s18 → s20)"
        theory = (
            "Under s18 OAPA 1861, the prosecution must prove specific intent to cause "
            "grievous bodily harm. Medical severity alone does not establish mens rea. "
            "The distinction between s18 (specific intent) and s20 (recklessness) turns "
            "on the defendant's state of mind at the time of the act. Where the incident "
            "is brief, chaotic, or involves a single blow, the inference of recklessness "
            "(s20) is more appropriate than specific intent (s18). "
        )
        basis_request = "Request CPS intent basis (written confirmation of why s18 not s20)"
        representations = "Prepare s18→s20 written representations to CPS"
    else:
        charged = f"the s{section} offence" if section else "the offence charged"
        title = f"Intent Downgrade (s{section} mental element)" if section else (
            "Intent Downgrade (mental element)"
        )
        theory = (
            f"The prosecution must prove the mental element of {charged}. Medical "
            "severity alone does not establish mens rea. Where the incident is brief, "
            "chaotic, or involves a single blow, the evidence may support a lesser "
            f"offence rather than {charged}. "
        )
        basis_request = "Request CPS basis for the mental element relied on (written confirmation)"
        representations = "Prepare written representations to CPS on the level of charge"

    return Strategy(
        id="strategy-intent-downgrade",
        title=title,
        theory=f"{theory}{support} {interview}".strip(),
        when_to_use=(
            "When prosecution relies on inference of intent, incident is chaotic/short, "
            "no admissions, and no expert evidence on intent exists."
        ),
        risks=(
            "Prosecution may argue planning/premeditation if evidence emerges",
            "Medical severity alone may influence jury",
            "Weapon use may support intent inference",
        ),
        immediate_actions=(
            "Request full medical causation narrative from prosecution",
            basis_request,
            representations,
            "Obtain medical records to assess injury severity and mechanism",
            "Consider expert evidence on intent if medical evidence is ambiguous",
        ),
        disclosure_dependency=False,
        downgrade_target=DOWNGRADE_LADDER.get(section),
        provisional=provisional,
    )


def _disclosure_pressure(thin: bool, provisional: bool) -> Strategy:
    if thin:
        middle = "This strategy is provisional pending full disclosure review."
    else:
        middle = (
            "Disclosure failures can lead to abuse of process applications and stays "
            "of proceedings where material is significant."
        )
    return Strategy(
        id="strategy-disclosure-pressure",
        title="Disclosure Pressure / Trial Readiness Attack",
        theory=(
            "The Criminal Procedure and Investigations Act 1996 (CPIA) and Criminal "
            "Procedure Rules impose strict disclosure obligations on the prosecution. "
            "Under s3 CPIA, the prosecution must disclose all material that might "
            "reasonably be considered capable of undermining the prosecution case or "
            "assisting the defence. Failure to disclose CCTV footage, MG6 schedules, "
            "unused material, or forensic methodology constitutes a breach of "
            "disclosure obligations and may render the trial unfair under Article 6 "
            f"ECHR. {middle} Where disclosure is incomplete, the prosecution is not "
            "trial-ready, creating adjournment pressure and potential narrowing of "
            "the prosecution case."
        ),
        when_to_use=(
            "When CCTV not fully disclosed, MG6/unused material unclear, forensic "
            "methodology missing, or disclosure gaps exist."
        ),
        risks=(
            "Court may grant adjournment rather than stay",
            "Prosecution may serve material late but before trial",
            "Disclosure failures may not be severe enough for stay",
        ),
        immediate_actions=(
            "Send CPIA s7A letter requesting outstanding material",
            "Challenge MG6C/D schedules for completeness",
            "Demand CCTV continuity and full disclosure",
            "Request forensic methodology and chain of custody",
            "Consider abuse of process application if disclosure failures persist",
        ),
        disclosure_dependency=True,
        provisional=provisional,
    )


def _identification_attack(thin: bool, provisional: bool) -> Strategy:
    if thin:
        tail = (
            "This analysis is provisional pending full disclosure of identification "
            "procedures and evidence."
        )
    else:
        tail = (
            "Identification evidence obtained in breach of Code D may be excluded under "
            "s78 PACE. Contamination, confidence inflation, and procedural breaches "
            "undermine identification reliability and may render evidence inadmissible "
            "or require a Turnbull direction to the jury."
        )
    return Strategy(
        id="strategy-identification-attack",
        title="Identification Reliability Attack",
        theory=(
            "Code D PACE 1984 and the Turnbull guidelines require identification "
            "evidence to be reliable and properly obtained. VIPER procedures must "
            "comply with Code D Annex E. Facial recognition technology is "
            "investigative only and not admissible as positive identification "
            f"evidence. {tail}"
        ),
        when_to_use=(
            "When VIPER used, CCTV/facial recognition involved, or identification "
            "evidence lacks expert validation."
        ),
        risks=(
            "Identification may be strong despite procedural issues",
            "Court may admit identification with warning rather than exclude",
            "Multiple witnesses may support identification",
        ),
        immediate_actions=(
            "Request full VIPER pack and procedure documentation",
            "Request facial recognition methodology and confidence scores",
            "Request all CCTV footage and continuity evidence",
            "Consider Turnbull direction preparation",
            "Assess identification procedure compliance with Code D",
        ),
        disclosure_dependency=True,
        provisional=provisional,
    )


def _controlled_plea() -> Strategy:
    return Strategy(
        id="strategy-controlled-plea",
        title="Controlled Plea Position (Risk-Averse Option)",
        theory=(
            "If weapon + injury are strong but intent is weak, a controlled plea to "
            "s20 preserves credit, caps sentencing exposure, and avoids jury "
            "inference of intent. This strategy is OPTIONAL and should only be pursued "
            "if client is risk-averse and medical evidence supports downgrade."
        ),
        when_to_use=(
            "When weapon + injury are strong but intent is weak, and client is "
            "risk-averse. NEVER default - always optional."
        ),
        risks=(
            "Client may plead to offence they could have defended",
            "Sentencing credit may be less than full trial acquittal",
            "May miss opportunity to challenge prosecution case",
        ),
        immediate_actions=(
            "Prepare basis of plea to s20 (if s18 charged)",
            "Obtain medical clarification on injury mechanism",
            "Advise client on sentencing bands and credit",
            "Consider expert evidence on intent before plea",
            "Ensure client fully understands risks and benefits",
        ),
        disclosure_dependency=True,
        downgrade_target=None,
        # Requires explicit informed instructions, whatever the evidence state
        provisional=True,
    )


def _pace_breach(thin: bool, provisional: bool) -> Strategy:
    if thin:
        tail = (
            "This analysis is provisional pending full disclosure of custody records "
            "and interview recordings."
        )
    else:
        tail = (
            "Oppression includes any conduct that makes it likely that a confession is "
            "unreliable. A no comment interview preserves the defendant's position and "
            "prevents the prosecution from using silence against the defendant under "
            "s34 Criminal Justice and Public Order Act 1994, provided the defendant was "
            "properly advised."
        )
    return Strategy(
        id="strategy-pace-breach",
        title="PACE Breach / Interview Exclusion",
        theory=(
            "PACE Code C requires a caution before questioning, the right to consult a "
            "solicitor, and proper recording of interviews. Breaches of PACE may render "
            "interview evidence inadmissible under s76(2) PACE (oppression) or s78 PACE "
            f"(unfairness). {tail}"
        ),
        when_to_use=(
            "When interview exists, PACE compliance is questionable, or "
            "caution/solicitor rights were breached."
        ),
        risks=(
            "Court may admit interview with warning rather than exclude",
            "PACE breaches may not be severe enough for exclusion",
            "Prosecution may argue no prejudice",
        ),
        immediate_actions=(
            "Request full custody record and interview recording",
            "Assess PACE compliance (caution, solicitor, recording)",
            "Request disclosure of all interview-related material",
            "Consider s76/s78 PACE exclusion application",
            "Prepare submissions on admissibility",
        ),
        disclosure_dependency=True,
        provisional=provisional,
    )


def _evidence_weakness(thin: bool, provisional: bool) -> Strategy:
    if thin:
        tail = "This analysis is provisional pending full disclosure and evidence review."
    else:
        tail = (
            "The test for no case to answer is where there is no evidence that the crime "
            "has been committed, or the evidence is so weak that no reasonable jury could "
            "convict. Even strong-looking cases may have weaknesses that emerge on closer "
            "examination of the evidence."
        )
    return Strategy(
        id="strategy-evidence-weakness",
        title="Evidence Weakness / No Case to Answer",
        theory=(
            "The prosecution must prove all elements of the offence beyond reasonable "
            "doubt. Weak evidence, contradictions, or missing elements may support a "
            f"submission of no case to answer or acquittal. {tail}"
        ),
        when_to_use=(
            "When evidence is weak, contradictions exist, or elements of offence are "
            "not clearly proven."
        ),
        risks=(
            "Evidence may strengthen with disclosure",
            "Court may find case sufficient despite weaknesses",
            "Jury may convict despite weak evidence",
        ),
        immediate_actions=(
            "Identify missing elements of offence",
            "Request all evidence supporting each element",
            "Prepare no case to answer submission",
            "Identify contradictions in prosecution case",
            "Consider expert evidence to challenge prosecution case",
        ),
        disclosure_dependency=True,
        provisional=provisional,
    )


def _disclosure_first() -> Strategy:
    return Strategy(
        id="strategy-disclosure-first",
        title="Disclosure-First Strategy",
        theory=(
            "Until disclosure is complete, the defence position cannot be fully "
            "determined. All strategies are provisional and subject to disclosure "
            "completion. Focus on securing all material, assessing prosecution case, "
            "and preserving all options."
        ),
        when_to_use="When disclosure is incomplete or bundle is thin.",
        risks=(
            "Strategy may change significantly with disclosure",
            "May miss opportunities if too cautious",
            "Client may want more certainty",
        ),
        immediate_actions=(
            "Request all outstanding disclosure",
            "Assess prosecution case as disclosed",
            "Preserve all defence options",
            "Advise client on provisional nature of strategy",
            "Review strategy once disclosure completes",
        ),
        disclosure_dependency=True,
        provisional=True,
    )


# =============================================================================
# GENERATION
# =============================================================================

def generate_strategies(
    charge: Optional[Charge],
    graph: EvidenceGraph,
    disclosure_status: DisclosureStatus,
    interview_stance: Union[InterviewStance, str, None] = None,
) -> list[Strategy]:
    """
    Generate defence strategies in fixed candidate order.

    Always returns at least two strategies. A missing charge falls back
    to the charge recorded in the graph's case metadata.
    """
    if charge is None and graph.case_meta.charge:
        charge = Charge(offence=graph.case_meta.charge)

    stance = _coerce_stance(interview_stance)
    section = charge.resolved_section if charge else ""
    violent = charge.is_violent if charge else False
    thin = is_thin_bundle(graph.readiness)
    provisional = (
        not graph.readiness.can_commit_strategy or not disclosure_status.is_complete
    )
    flags = disclosure_status.key_item_flags

    strategies: list[Strategy] = []

    if section == "18" or (violent and section != "20"):
        strategies.append(_intent_downgrade(section, thin, stance, provisional))

    if (
        disclosure_status.gaps
        or not flags.get("mg6c_disclosed", True)
        or not flags.get("cctv_disclosed", True)
    ):
        strategies.append(_disclosure_pressure(thin, provisional))

    if graph.has_item(
        EvidenceType.IDENTIFICATION,
        EvidenceType.CCTV,
        EvidenceType.BWV,
        include_withheld=True,
    ):
        strategies.append(_identification_attack(thin, provisional))

    if section in ("18", "20"):
        strategies.append(_controlled_plea())

    if (
        graph.has_item(EvidenceType.CUSTODY_INTERVIEW)
        and stance is InterviewStance.NO_COMMENT
    ):
        strategies.append(_pace_breach(thin, provisional))

    if len(strategies) < MIN_STRATEGIES:
        strategies.append(_evidence_weakness(thin, provisional))

    if len(strategies) < MIN_STRATEGIES:
        strategies.append(_disclosure_first())

    logger.debug(
        "generated %d strategies (section=%r provisional=%s): %s",
        len(strategies), section, provisional,
        ", ".join(s.id for s in strategies),
    )
    return strategies
