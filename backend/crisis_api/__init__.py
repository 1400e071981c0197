"""Crisis Reporting API"""
