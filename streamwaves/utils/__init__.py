"""Utility helpers for StreamWaves"""
