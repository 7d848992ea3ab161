"""Command line interface for sf-deploy"""
