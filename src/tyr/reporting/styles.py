"""Embedded CSS for the Tyr HTML report.

All styles are self-contained; the report references no external
stylesheet, font or CDN.

Color scheme:
    - Header:    #1f2937
    - Critical:  #b91c1c
    - High:      #dc2626
    - Medium:    #ca8a04
    - Low:       #16a34a
    - Unknown:   #6b7280
"""

from __future__ import annotations

REPORT_CSS: str = """
*,*::before,*::after{box-sizing:border-box;margin:0;padding:0}
body{font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,
  Ubuntu,sans-serif;background:#f3f4f6;color:#111827;line-height:1.6}
.header{background:#1f2937;color:#fff;padding:24px 32px}
.header h1{font-size:1.5rem;font-weight:700}
.header .subtitle{font-size:0.85rem;color:#9ca3af;margin-top:2px}
.container{max-width:1100px;margin:0 auto;padding:24px 16px}

/* --- Summary cards --- */
.stats-grid{display:grid;grid-template-columns:repeat(auto-fit,minmax(150px,1fr));
  gap:14px;margin-bottom:24px}
.stat-card{background:#fff;border-radius:10px;padding:18px;text-align:center;
  box-shadow:0 1px 3px rgba(0,0,0,.08);border-top:3px solid #e5e7eb}
.stat-card .value{font-size:1.9rem;font-weight:800;line-height:1.1}
.stat-card .label{font-size:0.8rem;color:#6b7280;margin-top:4px;
  text-transform:uppercase;letter-spacing:0.04em}
.stat-card.total{border-top-color:#2563eb}
.stat-card.score{border-top-color:#7c3aed}
.stat-card.risk-Critical{border-top-color:#b91c1c}
.stat-card.risk-High{border-top-color:#dc2626}
.stat-card.risk-Medium{border-top-color:#ca8a04}
.stat-card.risk-Low{border-top-color:#16a34a}
.stat-card.risk-Unknown{border-top-color:#6b7280}

/* --- Sections --- */
.section{background:#fff;border-radius:10px;margin-bottom:24px;
  box-shadow:0 1px 3px rgba(0,0,0,.08);overflow:hidden}
.section-header{display:flex;align-items:center;justify-content:space-between;
  padding:14px 22px;cursor:pointer;user-select:none;background:#f9fafb;
  border-bottom:1px solid #e5e7eb}
.section-header h2{font-size:1.05rem;font-weight:600}
.section-header.collapsed .toggle{transform:rotate(-90deg)}
.section-body{padding:18px 22px}
.section-body.hidden{display:none}

/* --- Threat cards --- */
.threat{border:1px solid #e5e7eb;border-left:4px solid #6b7280;
  border-radius:8px;padding:14px 18px;margin-bottom:14px}
.threat.risk-Critical{border-left-color:#b91c1c}
.threat.risk-High{border-left-color:#dc2626}
.threat.risk-Medium{border-left-color:#ca8a04}
.threat.risk-Low{border-left-color:#16a34a}
.threat h3{font-size:1rem;margin-bottom:6px}
.threat .meta{font-size:0.82rem;color:#4b5563;margin-bottom:8px}
.threat h4{font-size:0.85rem;margin:10px 0 4px;color:#374151}
.threat ol,.threat ul{margin-left:22px;font-size:0.9rem}
.threat .note{background:#eff6ff;border-radius:6px;padding:10px 12px;
  margin-top:10px;font-size:0.88rem}
.threat.hidden{display:none}

/* --- Badges --- */
.badge{display:inline-block;padding:1px 9px;border-radius:9999px;
  font-size:0.74rem;font-weight:600;text-transform:uppercase}
.badge-Critical{background:#fef2f2;color:#b91c1c;border:1px solid #fecaca}
.badge-High{background:#fff1f2;color:#dc2626;border:1px solid #fecdd3}
.badge-Medium{background:#fefce8;color:#ca8a04;border:1px solid #fde68a}
.badge-Low{background:#f0fdf4;color:#16a34a;border:1px solid #bbf7d0}
.badge-Unknown{background:#f3f4f6;color:#6b7280;border:1px solid #e5e7eb}

/* --- Tables --- */
table{width:100%;border-collapse:collapse;font-size:0.88rem}
thead th{text-align:left;padding:8px 12px;background:#f9fafb;
  border-bottom:2px solid #e5e7eb;font-weight:600;color:#4b5563}
tbody td{padding:8px 12px;border-bottom:1px solid #f3f4f6;vertical-align:top;
  word-break:break-word}

/* --- Filters --- */
.filters{display:flex;gap:12px;margin-bottom:14px;align-items:center}
.filters label{font-size:0.82rem;font-weight:500;color:#4b5563}
.filters select{padding:5px 10px;border:1px solid #d1d5db;border-radius:6px;
  font-size:0.82rem;background:#fff}
.filters .shown{font-size:0.8rem;color:#6b7280}

.file-section .errors{color:#b91c1c}
.empty-state{text-align:center;padding:30px 20px;color:#9ca3af}

@media print{
  .section-body.hidden,.threat.hidden{display:block !important}
  .filters{display:none}
  body{background:#fff}
}
@media(max-width:640px){
  .header{padding:16px}
  .stats-grid{grid-template-columns:repeat(2,1fr)}
}
"""
