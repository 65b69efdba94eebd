from datetime import datetime
from typing import Any, Iterable, List

from medpanel.assistant.report import PatientReportData


SYSTEM_PREAMBLE = (
    "You are a clinical assistant supporting doctors. Answer their medical questions, "
    "give guidance on patient information, treatment options, drug interactions and general "
    "medical topics. Always use professional language and avoid giving a definitive "
    "diagnosis - only provide guidance."
)

REPORT_REQUEST = [
    "General assessment of the patient's health",
    "Analysis of the health measurements and their trends",
    "Prioritised active complaints with recommendations",
    "Effectiveness of the exercise plans",
    "Follow-up recommendations and next steps",
    "Risks and warnings to watch for",
]


def format_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if not value:
        return ""
    try:
        return datetime.fromisoformat(str(value)).strftime("%Y-%m-%d")
    except ValueError:
        return str(value)


def build_chat_prompt(history: Iterable[Any], content: str, preamble: str = SYSTEM_PREAMBLE) -> str:
    """``history`` items need ``role`` and ``content`` attributes; the new turn goes last."""
    lines = [f"{'User' if m.role == 'user' else 'Assistant'}: {m.content}" for m in history]
    conversation = "\n".join(lines)
    return f"{preamble}\n\nConversation history:\n{conversation}\n\nUser: {content}\n\nAssistant:"


def _measurement_lines(data: PatientReportData) -> List[str]:
    lines = ["## HEALTH MEASUREMENTS"]
    if not data.measurements:
        return lines + ["No health measurements recorded yet.", ""]
    for m in data.measurements:
        mtype = m.get("measurement_type") or {}
        reading = " ".join(str(part) for part in (m.get("value"), mtype.get("unit")) if part not in (None, ""))
        lines.append(f"- {mtype.get('name') or 'Unknown'}: {reading} ({format_date(m.get('measured_at'))})")
    return lines + [""]


def _complaint_label(complaint: dict) -> dict:
    return complaint.get("subcategory") or {}


def _complaint_lines(data: PatientReportData) -> List[str]:
    active = [c for c in data.complaints if c.get("is_active")]
    resolved = [c for c in data.complaints if not c.get("is_active")]

    lines = ["## ACTIVE COMPLAINTS"]
    if active:
        for c in active:
            sub = _complaint_label(c)
            priority = sub.get("priority_level") or "unspecified"
            lines.append(
                f"- {sub.get('name') or 'General'} ({priority} priority): {c.get('description') or ''} "
                f"(Started: {format_date(c.get('start_date'))})"
            )
    else:
        lines.append("No active complaints at the moment.")
    lines.append("")

    if resolved:
        lines.append("## PAST COMPLAINTS")
        for c in resolved[:5]:
            sub = _complaint_label(c)
            period = format_date(c.get("start_date"))
            if c.get("end_date"):
                period += f" - {format_date(c.get('end_date'))}"
            lines.append(f"- {sub.get('name') or 'General'}: {c.get('description') or ''} ({period})")
        lines.append("")
    return lines


def _exercise_lines(data: PatientReportData) -> List[str]:
    lines = ["## EXERCISE PLANS"]
    if not data.exercise_plans:
        return lines + ["No exercise plans yet.", ""]
    for plan in data.exercise_plans:
        exercise = plan.get("exercise") or {}
        difficulty = exercise.get("difficulty") or "unspecified"
        lines.append(
            f"- {exercise.get('name') or 'Unnamed plan'} ({difficulty} level, {plan.get('frequency') or ''}, "
            f"{format_date(plan.get('start_date'))})"
        )
        if exercise.get("description"):
            lines.append(f"  Description: {exercise['description']}")
    return lines + [""]


def _communication_lines(data: PatientReportData) -> List[str]:
    lines = ["## RECENT COMMUNICATION"]
    if not data.recent_messages:
        return lines + ["No message history with the patient yet.", ""]
    lines.append(f"{len(data.recent_messages)} recent messages on record.")
    # recent_messages is newest first
    lines.append(f"Last message date: {format_date(data.recent_messages[0].get('created_at'))}")
    return lines + [""]


def build_patient_report_prompt(data: PatientReportData) -> str:
    patient = data.patient
    lines = ["Prepare a detailed medical assessment report for the following patient:", ""]

    lines.append("## PATIENT INFORMATION")
    lines.append(f"Name: {patient.name} {patient.surname}")
    lines.append(f"Age: {patient.age}")
    if patient.diagnosis:
        lines.append(f"Diagnosis: {patient.diagnosis}")
    lines.append("")

    lines += _measurement_lines(data)
    lines += _complaint_lines(data)
    lines += _exercise_lines(data)
    lines += _communication_lines(data)

    lines.append("## REPORT REQUEST")
    lines.append("Prepare a comprehensive medical assessment report for this patient covering:")
    lines += [f"{i}. {item}" for i, item in enumerate(REPORT_REQUEST, start=1)]
    lines.append("")
    lines.append(
        "Please write a professional, detailed report that is useful to the doctor. Avoid a "
        "definitive diagnosis; base the assessment and recommendations only on the available data."
    )
    return "\n".join(lines)
