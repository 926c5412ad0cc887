"""Threshold rules for phase-advancement readiness."""

READY_ATTENDANCE = 90
READY_REVENUE_PER_HOUR = 5
WATCH_ATTENDANCE = 80

ASSESSMENTS = {
    'ready': (
        "Consistent attendance and strong productivity indicate readiness for advancement.",
        "Schedule a phase review and confirm certification progress.",
    ),
    'watch': (
        "Performance is trending in the right direction but needs continued consistency.",
        "Increase check-ins and revisit weekly goals.",
    ),
    'not_ready': (
        "Attendance and output remain below threshold. Prioritize coaching and support.",
        "Coordinate with supervisors to address barriers to attendance.",
    ),
}


def readiness_status(attendance_rate, revenue_per_hour):
    if attendance_rate >= READY_ATTENDANCE and revenue_per_hour >= READY_REVENUE_PER_HOUR:
        return 'ready'
    if attendance_rate >= WATCH_ATTENDANCE:
        return 'watch'
    return 'not_ready'


def assess(metrics):
    """Return (status, assessment, recommendation) for a metrics dict."""
    status = readiness_status(metrics['attendance_rate'], metrics['revenue_per_hour'])
    assessment, recommendation = ASSESSMENTS[status]
    return status, assessment, recommendation
