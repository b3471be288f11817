"""Attendance Guard package.

Admission control and fraud heuristics for daily attendance marking,
organized by feature modules (attendance, fraud, policy, statistics, events)
with a thin Flask controller layer over service/repository layers.
"""
