"""Availability app package.

This app holds the availability & booking-window engine: host-defined
date rules, the guest date-range calendar, stay validation for the
booking form and the price breakdown shown before payment. The domain
layer is pure Python; the app only adds settings and serializers around it.
"""
