"""SIA - System Information Analyzer."""
