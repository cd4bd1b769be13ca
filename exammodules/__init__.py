"""Exam / survey module sheets: table view and flag sync for the studio API."""
