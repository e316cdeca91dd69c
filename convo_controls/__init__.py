"""Reusable dialog controls with guarded turn dispatch and initiative handling."""
