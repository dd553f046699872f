"""RFID attendance package.

This package is organized by feature modules (identities, schedules,
attendance, readers, ...) with a thin Flask controller layer and
service/repository layers underneath.
"""
