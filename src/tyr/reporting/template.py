"""HTML page skeleton for Tyr reports.

Placeholders:
    ``{{TITLE}}``    -- escaped report title.
    ``{{SUBTITLE}}`` -- escaped subtitle line.
    ``{{CSS}}``      -- embedded stylesheet (from the styles module).
    ``{{BODY}}``     -- server-rendered, escaped report markup.
    ``{{DATA}}``     -- canonical JSON payload, safe for a script block.
    ``{{JS}}``       -- embedded script (from the scripts module).

The page is self-contained: no external CDN, no server, no fetch calls.
"""

from __future__ import annotations

REPORT_HTML: str = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>{{TITLE}}</title>
<style>
{{CSS}}
</style>
</head>
<body>

<div class="header">
  <h1>{{TITLE}}</h1>
  <div class="subtitle">{{SUBTITLE}}</div>
</div>

<div class="container">
{{BODY}}
</div><!-- /container -->

<script type="application/json" id="tyr-data">{{DATA}}</script>
<script>
{{JS}}
</script>
</body>
</html>"""
