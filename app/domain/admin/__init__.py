"""Admin domain - dashboard, booking management, revenue analytics and export"""
