"""Classroom Ledger package.

Daily attendance and a quiz-points leaderboard for a student roster, organized
by feature modules (students, attendance, quizzes, points, leaderboard, imports, teams)
over a keyed document store, with a thin Flask controller layer.
"""
