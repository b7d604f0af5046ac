"""HTTP surface for the turn pipeline and triage authoring tools."""
