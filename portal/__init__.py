"""
Membership Portal Package

This package contains the Django app for the membership portal: users,
programs (video courses and workbooks), purchases, entitlement checks and
progress tracking.

Structure:
- users/: custom user model, signup, login, password reset, newsletter
- programs/: products, content items, purchases, progress records and their endpoints
- services/: entitlements, progress tracking, signed URLs, notifications
- management/: seeding commands

Author: Portal Development Team
Version: 1.0.0
"""
