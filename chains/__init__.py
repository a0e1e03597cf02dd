from chains.registery import ChainRegistry
from chains.ethereum import ethereum
from chains.polygon import polygon


registery = ChainRegistry([ethereum, polygon])
