# deploy_manifest.py
# Example manifest: fetch an npm package, clone a repo, then run the tests
# and clean up the deploy dir.
from __future__ import annotations


def run_tests(done):
    print("Function test done.")
    done()


MANIFEST = {
    "id3": {
        "type": "npm",
    },
    "node-redis": {
        "type": "git",
        "path": "git://github.com/Tim-Smart/node-redis.git",
    },
    "run tests": {
        "type": "command",
        "commands": [
            run_tests,
            "rm -rf .deploy",
        ],
    },
}
