from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from ploegwissel.core.document import Document, TriState


LOGO_DATA_URL = re.compile(r"^data:image/(png|jpeg|webp|svg\+xml);base64,[A-Za-z0-9+/=\s]+$")
FALLBACK_TITLE = "Ploegwissel Checklist"


@dataclass(frozen=True)
class PrintableArtifact:
    title: str
    html: str


def _e(value: str) -> str:
    return html.escape(value or "-", quote=True)


def _yes_no(value: TriState) -> str:
    if value is TriState.UNDETERMINED:
        return "-"
    return "Ja" if value is TriState.YES else "Nee"


def _flag(value: bool) -> str:
    return "Ja" if value else "Nee"


def _join_checked(mapping: Mapping[str, bool]) -> str:
    return ", ".join(key for key, checked in mapping.items() if checked) or "-"


def _kv(label: str, value: str, pre: bool = False) -> str:
    cls = "kv pre" if pre else "kv"
    return f'<div class="{cls}"><span class="k">{label}:</span> {value}</div>'


def _logo(logo_image: Optional[str]) -> str:
    if logo_image and LOGO_DATA_URL.match(logo_image):
        return f'<img class="logo" src="{html.escape(logo_image, quote=True)}" alt="Logo" />'
    return '<div class="logo-placeholder">LOGO</div>'


def render(
    doc: Document,
    company_name: str,
    logo_image: Optional[str] = None,
    auto_print: bool = True,
) -> PrintableArtifact:
    """Render a standalone, print-ready HTML report of one checklist snapshot.

    All user text is escaped. Only base64 ``data:`` logos of an accepted image
    type are embedded; anything else gets the placeholder box.
    """
    meta, prod, tech, qa, hyg, safe, plan, sign = (
        doc.meta, doc.prod, doc.tech, doc.qa, doc.hyg, doc.safe, doc.plan, doc.sign,
    )
    title = f"Ploegwissel_{meta.date}_{meta.shift}"
    print_script = (
        '<script>window.addEventListener("load", function () { window.focus(); window.print(); });</script>'
        if auto_print
        else ""
    )
    page = f"""<!doctype html>
<html lang="nl">
<head>
<meta charset="utf-8" />
<meta name="viewport" content="width=device-width, initial-scale=1" />
<title>{html.escape(title)}</title>
<style>
  :root {{ --fg:#111; --muted:#666; --border:#ddd; }}
  body {{ font-family: ui-sans-serif, system-ui, -apple-system, Segoe UI, Roboto, Arial, sans-serif; color: var(--fg); margin: 24px; }}
  .row {{ display:flex; align-items:flex-start; justify-content:space-between; gap:16px; }}
  .brand {{ display:flex; align-items:center; gap:14px; }}
  .logo {{ height:48px; width:auto; }}
  .logo-placeholder {{ height:48px; width:96px; border:1px solid var(--border); border-radius:10px; display:flex; align-items:center; justify-content:center; color:var(--muted); font-size:11px; }}
  .title {{ font-size:20px; font-weight:700; }}
  .subtitle {{ color: var(--muted); font-size:13px; margin-top:2px; }}
  .meta {{ font-size:13px; }}
  .meta div {{ margin: 2px 0; }}
  .grid {{ display:grid; grid-template-columns: 1fr 1fr; gap: 12px; margin-top:18px; }}
  .card {{ border:1px solid var(--border); border-radius:12px; padding:12px; }}
  .card h3 {{ font-size:14px; margin:0 0 10px 0; }}
  .kv {{ font-size:13px; margin:4px 0; }}
  .k {{ color: var(--muted); }}
  .pre {{ white-space: pre-wrap; }}
  .span2 {{ grid-column: span 2; }}
  hr {{ border:none; border-top:1px solid var(--border); margin:10px 0; }}
  .footer {{ margin-top:18px; font-size:11px; color: var(--muted); }}
  @media print {{ body {{ margin: 12mm; }} }}
</style>
</head>
<body>
  <div class="row">
    <div class="brand">
      {_logo(logo_image)}
      <div>
        <div class="title">{html.escape(company_name or FALLBACK_TITLE)}</div>
        <div class="subtitle">Melkpoederproductie – Overdracht</div>
      </div>
    </div>
    <div class="meta">
      <div><span class="k">Datum:</span> {_e(meta.date)}</div>
      <div><span class="k">Tijd:</span> {_e(meta.time)}</div>
      <div><span class="k">Ploeg:</span> {_e(meta.shift)}</div>
    </div>
  </div>

  <div class="grid">
    <div class="card">
      <h3>Basis</h3>
      {_kv('Operator', _e(meta.operator))}
      {_kv('Ploegleider', _e(meta.leader))}
      {_kv('Product', _e(prod.product))}
      {_kv('Batch', _e(prod.batch))}
      {_kv('Processtatus', _e(prod.status))}
      {_kv('Stabiel', _yes_no(prod.stable))}
      {_kv('Notities', _e(prod.notes), pre=True)}
    </div>

    <div class="card">
      <h3>Installaties</h3>
      {_kv('OK', _e(_join_checked(tech.ok)))}
      {_kv('Storingen', _yes_no(tech.has_issue))}
      {_kv('Details', _e(tech.issue_notes), pre=True)}
    </div>

    <div class="card">
      <h3>Kwaliteit</h3>
      {_kv('Monster genomen', _flag(qa.sample_taken))}
      {_kv('Verzonden QC', _flag(qa.sample_sent))}
      {_kv('Afwijking', _yes_no(qa.deviation))}
      {_kv('Blokkade', _yes_no(qa.blocked))}
      {_kv('Notities', _e(qa.notes), pre=True)}
    </div>

    <div class="card">
      <h3>Hygiëne &amp; Veiligheid</h3>
      {_kv('CIP', _flag(hyg.cip))}
      {_kv('Handreiniging', _flag(hyg.manual))}
      {_kv('Werkplek schoon', _flag(hyg.clean_area))}
      {_kv('Openstaande reiniging', _yes_no(hyg.open_tasks))}
      {_kv('Reiniging details', _e(hyg.open_notes), pre=True)}
      <hr />
      {_kv('Incident', _yes_no(safe.incident))}
      {_kv('Incident details', _e(safe.incident_notes), pre=True)}
      {_kv('Risico aanwezig', _yes_no(safe.risk))}
    </div>

    <div class="card span2">
      <h3>Planning &amp; Acties</h3>
      {_kv('Planning', _e(_join_checked(plan.items)))}
      {_kv('Acties volgende ploeg', _e(plan.actions), pre=True)}
    </div>

    <div class="card">
      <h3>Overdragend</h3>
      {_kv('Naam', _e(sign.from_name))}
      {_kv('Handtekening', _e(sign.from_sign))}
    </div>

    <div class="card">
      <h3>Ontvangend</h3>
      {_kv('Naam', _e(sign.to_name))}
      {_kv('Handtekening', _e(sign.to_sign))}
      {_kv('Besproken', _flag(sign.handover_done))}
    </div>
  </div>

  <div class="footer">Gegenereerd via Ploegwissel • Print/PDF archivering</div>
  {print_script}
</body>
</html>
"""
    return PrintableArtifact(title=title, html=page)
