import os
from pathlib import Path

# main builds its Jinja2 environment at import time
os.environ.setdefault("TEMPLATES_DIR", str(Path(__file__).resolve().parent.parent / "templates"))
