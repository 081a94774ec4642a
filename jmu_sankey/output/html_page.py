"""Self-contained HTML page with the diagram inside a container element."""

import logging
from pathlib import Path

from jmu_sankey.output.scene import Scene
from jmu_sankey.output.svg import _esc, render_svg

logger = logging.getLogger(__name__)


def render_html(scene: Scene, container_id: str = "my_dataviz", title: str = "Sankey Diagram") -> str:
    svg = render_svg(scene)
    cid = _esc(container_id)
    return f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{_esc(title)}</title>
<style>
body {{
    margin: 0;
    padding: 16px;
    background: #fff;
}}
#{cid} {{
    width: 100%;
}}
</style>
</head>
<body>
<div id="{cid}">
{svg}
</div>
</body>
</html>
'''


def write_html(scene: Scene, output_path: Path, container_id: str = "my_dataviz", title: str = "Sankey Diagram") -> Path:
    html = render_html(scene, container_id=container_id, title=title)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
    logger.info("Sankey page saved to %s (%d nodes, %d links)",
                output_path, len(scene.rects), len(scene.links))
    return output_path
