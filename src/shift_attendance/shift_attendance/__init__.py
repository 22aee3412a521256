"""Shift Attendance package.

Feature modules (shifts, rosters, punches, attendance, ...) each own a domain model,
a repository protocol and a MySQL implementation. The matching engine itself lives in
``shifts`` (candidate resolution, proximity, disambiguation, late/early) and
``attendance`` (segmentation, aggregation, orchestration).
"""
