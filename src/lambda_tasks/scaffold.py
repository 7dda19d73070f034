"""Template tree written into a new target by 'init'."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Template

from . import output

HANDLER_TEMPLATE = '''"""Lambda function {{ name }}."""

import json


def handler(event, context):
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"message": "Hello from {{ name }}!"}),
    }
'''

REQUIREMENTS_TEMPLATE = """# Runtime dependencies for {{ name }}, installed into the bundle by 'install'.
"""

CONFIG_TEMPLATE = """# Deployment settings for {{ name }}. Every key is optional.
functionName:
  develop: {{ name }}-dev
  production: {{ name }}
region: {{ region }}
handler: handler.handler
runtime: {{ runtime }}
# role: arn:aws:iam::123456789012:role/{{ name }}-role
# timeout: 30
# memorySize: 256
"""

GITIGNORE_TEMPLATE = """dist/
__pycache__/
"""

TEMPLATES: Dict[str, str] = {
    "handler.py": HANDLER_TEMPLATE,
    "requirements.txt": REQUIREMENTS_TEMPLATE,
    "lambda-config.yaml": CONFIG_TEMPLATE,
    ".gitignore": GITIGNORE_TEMPLATE,
}


def scaffold_target(
    target_dir: Path,
    name: Optional[str] = None,
    region: str = "us-west-2",
    runtime: str = "python3.12",
) -> List[Path]:
    """
    Renders the template tree into target_dir and returns the files written.

    Files that already exist are left untouched.
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    name = name or target_dir.resolve().name

    written = []
    for filename, source in TEMPLATES.items():
        path = target_dir / filename
        if path.exists():
            output.warning(f"Skipping {path}: already exists")
            continue
        template = Template(source, keep_trailing_newline=True)
        path.write_text(template.render(name=name, region=region, runtime=runtime))
        written.append(path)
    return written
