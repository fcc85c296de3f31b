import os
import traceback

import aws_cdk as cdk

from infra.aurora.input import load_config
from infra.aurora.stack import build_app
from shared.variables import Env

# export PYTHONPATH=$PYTHONPATH:.
#  cdk synth --app  "python infra/app.py"
#  cdk deploy --all  --app  "python infra/app.py"


def main():
    try:
        config = load_config()
        env = cdk.Environment(account=os.getenv(Env.aws_account), region=os.getenv(Env.aws_region))
        app = build_app(config, env=env)
    except Exception as e:
        traceback.print_exc()
        raise e
    app.synth()


if __name__ == '__main__':
    main()
