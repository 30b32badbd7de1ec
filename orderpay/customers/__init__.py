"""
Module 'customers': rattachement d'un abonné ManyChat à un client et lecture de sa dernière commande.
"""
