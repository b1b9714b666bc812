# type: ignore
from invoke import task


@task
def lint(ctx):
    """
    Run ruff and mypy over the package and the tests.
    """
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """
    Run tests with coverage information.
    """
    ctx.run("pytest --cov=tplinkctl --cov-report=term-missing", pty=True)


@task
def mock(ctx, model="HS100(UK)", port=9999):
    """
    Run a mock device on localhost, e.g. `invoke mock --model "LB110(EU)"`.
    """
    ctx.run(
        f'tplinkctl mock --host 127.0.0.1 --port {port} --model "{model}"', pty=True
    )


@task
def build_package(ctx):
    """
    Build sdist and wheel into dist/.
    """
    ctx.run("rm -rf dist")
    ctx.run("uv build")
