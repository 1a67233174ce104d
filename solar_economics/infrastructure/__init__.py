"""
Infrastructure layer: tariff schedules, solar production and pricing.
"""
