"""Submit, poll and translate remote document base jobs.

The orchestrator owns the only shared state in the package: the single-flight
gate, the scratch slot holding the in-flight task id, and the last document
base produced by a successful job.  Everything user facing (progress display,
notifications, audio cues, result display) is injected as a sink so the same
state machine drives a terminal or any other host.
"""
