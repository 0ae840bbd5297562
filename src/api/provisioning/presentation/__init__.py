"""Presentation layer for the provisioning bounded context.

HTTP routes and Lambda handlers translating driver invocations into
worker runs.
"""
