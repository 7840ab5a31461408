"""
exposure_engine/report/templates.py — Report email rendering.

Builds the emailed copy of an analysis: visibility per level with
probability labels, risks, the action plan and the summary. Produces an
HTML body plus a plain-text fallback. All player-supplied and LLM text is
HTML-escaped.
"""

from dataclasses import dataclass
from html import escape

from exposure_engine.intake.profile import PlayerProfile
from exposure_engine.scoring.insights import probability_label
from exposure_engine.scoring.result import AnalysisResult

TIMEFRAME_LABELS = {
    "Next_30_Days": "Next 30 days",
    "Next_90_Days": "Next 90 days",
    "Next_12_Months": "Next 12 months",
}

LABEL_COLORS = {
    "very low": "#ef4444",
    "low": "#f97316",
    "medium": "#ca8a04",
    "high": "#10b981",
}


@dataclass
class RenderedEmail:
    """Final email ready to be sent: subject, HTML body, plain-text body."""
    subject: str
    html_body: str
    plain_body: str


def _plain_report(profile: PlayerProfile, result: AnalysisResult, sender_name: str) -> str:
    lines = [
        f"Hi {profile.first_name},",
        "",
        "Here is your college soccer exposure report.",
        "",
        "RECRUITING VISIBILITY",
    ]
    for score in result.visibility_scores:
        label = probability_label(score.visibility_percent)
        lines.append(f"  {score.level.value:<5} {score.visibility_percent:>3}%  ({label})")

    lines += ["", "SUMMARY", result.plain_language_summary, ""]

    if result.key_risks:
        lines.append("KEY RISKS")
        lines += [f"  [{r.severity}] {r.category}: {r.message}" for r in result.key_risks]
        lines.append("")

    if result.action_plan:
        lines.append("ACTION PLAN")
        lines += [
            f"  {i}. ({TIMEFRAME_LABELS.get(a.timeframe, a.timeframe)}, {a.impact} impact) {a.description}"
            for i, a in enumerate(result.action_plan, start=1)
        ]
        lines.append("")

    if result.coach_short_evaluation:
        lines += ["COACH VIEW", result.coach_short_evaluation, ""]

    lines += ["Good luck,", sender_name]
    return "\n".join(lines)


def _html_report(profile: PlayerProfile, result: AnalysisResult, subject: str, sender_name: str) -> str:
    rows = []
    for score in result.visibility_scores:
        label = probability_label(score.visibility_percent)
        rows.append(
            f"<tr><td><strong>{score.level.value}</strong></td>"
            f"<td>{score.visibility_percent}%</td>"
            f"<td style=\"color:{LABEL_COLORS[label]}\">{label}</td>"
            f"<td class=\"notes\">{escape(score.notes)}</td></tr>"
        )

    rows_html = "".join(rows)
    risks = "\n".join(
        f"<li><strong>{escape(r.severity)} · {escape(r.category)}</strong>: {escape(r.message)}</li>"
        for r in result.key_risks
    )
    plan = "\n".join(
        f"<li><em>{escape(TIMEFRAME_LABELS.get(a.timeframe, a.timeframe))}</em> "
        f"({escape(a.impact)} impact): {escape(a.description)}</li>"
        for a in result.action_plan
    )

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape(subject)}</title>
  <style>
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
      font-size: 15px;
      line-height: 1.6;
      color: #1a1a1a;
      background: #ffffff;
      margin: 0;
      padding: 0;
    }}
    .container {{
      max-width: 640px;
      margin: 40px auto;
      padding: 0 24px;
    }}
    table {{ border-collapse: collapse; width: 100%; }}
    td {{ padding: 6px 8px; border-bottom: 1px solid #eee; vertical-align: top; }}
    .notes {{ color: #666; font-size: 13px; }}
    .signature {{
      margin-top: 32px;
      color: #555;
      font-size: 14px;
      border-top: 1px solid #eee;
      padding-top: 16px;
    }}
  </style>
</head>
<body>
  <div class="container">
    <p>Hi {escape(profile.first_name)},</p>
    <p>Here is your college soccer exposure report.</p>
    <h3>Recruiting visibility</h3>
    <table>
      {rows_html}
    </table>
    <h3>Summary</h3>
    <p>{escape(result.plain_language_summary)}</p>
    <h3>Key risks</h3>
    <ul>
      {risks}
    </ul>
    <h3>Action plan</h3>
    <ol>
      {plan}
    </ol>
    <p><em>{escape(result.coach_short_evaluation)}</em></p>
    <div class="signature">
      <strong>{escape(sender_name)}</strong>
    </div>
  </div>
</body>
</html>"""


def render_report_email(
    profile: PlayerProfile,
    result: AnalysisResult,
    sender_name: str = "Exposure Engine",
) -> RenderedEmail:
    """
    Render an analysis as an email.

    Args:
        profile:     The scored player profile.
        result:      Analysis result from either engine.
        sender_name: Name to sign off with.

    Returns:
        RenderedEmail with subject, HTML body and plain-text body.
    """
    primary = result.primary_level
    subject = (
        f"Your Exposure Report: {profile.full_name}, Class of {profile.grad_year} "
        f"({primary.value} {result.visibility_for(primary)}%)"
    )
    return RenderedEmail(
        subject=subject,
        html_body=_html_report(profile, result, subject, sender_name),
        plain_body=_plain_report(profile, result, sender_name),
    )
