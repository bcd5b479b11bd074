"""
Display binding and the update trigger.

Wires extracted summaries into named display elements (console, memory,
static HTML page) without any module-level state.
"""
