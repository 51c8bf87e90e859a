"""Session state machine and front ends."""
