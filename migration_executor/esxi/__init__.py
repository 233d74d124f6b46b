"""
ESXi Module
Runs esxcli on ESXi hosts over SSH
"""
from .ssh_client import EsxcliRow, EsxiSshClient, parse_csv_output

__all__ = ['EsxcliRow', 'EsxiSshClient', 'parse_csv_output']
