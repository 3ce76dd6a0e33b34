"""tightrope.tools: `python -m` entry points over JSON payload files.

  reflow_payload  cascade of one override (or --project re-tightening)
  order_payload   dependency-respecting display order
  check_payload   payload and precedence validation

Submodules are not imported here; each one is loaded only when run.
"""

__all__: list[str] = []
