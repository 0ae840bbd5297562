"""Shared Kernel module.

This module contains foundational components that are explicitly shared across
bounded contexts: the observation context carried by every domain probe and
the bounded retry helper used by cloud adapters. Changes here affect every
worker and should be carefully coordinated.
"""
