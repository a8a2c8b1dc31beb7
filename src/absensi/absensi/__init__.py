"""Absensi: geofenced attendance and leave tracking API.

This package is organized by feature modules (users, attendance, leave)
with a thin Flask controller layer over service/repository layers.
"""
