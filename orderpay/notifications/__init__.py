"""
Module 'notifications': mise en forme des commandes et envoi vers ManyChat.
"""
