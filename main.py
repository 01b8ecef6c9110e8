from rich import print
from rich.pretty import pprint

from flagtree import *

sync = Registry()
sync.optional("info", "i", "display package information", "package")
sync.optional("update", "u", "update package database")
sync.required("target", "t", "package to sync", "name")
sync.required("mode", "m", "sync mode", "mode", "best")
sync.switch("verbose", "v", "show progress")
sync.set_exclusive("info", "update")

root = Registry()
root.sub("sync", sync, "S", "synchronize packages")
root.switch("verbose", "v", "verbose output")


if __name__ == '__main__':
    print(helptable(root, title="flagtree"))
    result = invoke(root, shell=True)
    pprint(result)
    print(resulttree(result))
