"""Community events package.

Organized by feature modules (events, registrations, attendance, qrcodes,
invitations, users) with a thin Flask controller layer on top of
service/repository layers.
"""
