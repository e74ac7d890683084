"""
Demonstration of a scriptshell script.

Run it normally, or try:
    python examples/demo_script.py --verbose some-arg
    python examples/demo_script.py --dry-run some-arg
    python examples/demo_script.py -v cmds --continue-on-error some-arg
    python examples/demo_script.py --interactive some-arg

Press Ctrl-C inside a section to skip the rest of that section, outside a
section to abort just the running command, and Ctrl-\\ to stop the script.
"""

import sys
from datetime import date

from scriptshell import ArgumentsNotValid, ShellScript

script = ShellScript("demo_script", "Exercise the scriptshell helpers.")

script.add_option("-d", "do_something", is_flag=True, help="Set the do_something flag.")
script.add_option("--at", "at", default=None, help="A date like 2008-11-01.")

script.set_defaults(continue_on_error=False, verbosity="all", do_something=False)


@script.check_arguments
def check(script: ShellScript) -> None:
    script.echo("Checking if args are valid")
    if not script.arguments:
        raise ArgumentsNotValid("Need at least 1 argument")
    if script.options.at is not None:
        try:
            date.fromisoformat(script.options.at)
        except ValueError:
            raise ArgumentsNotValid(f"Not a date: {script.options.at}") from None


async def body(script: ShellScript) -> None:
    if script.options.do_something:
        script.echo("I'm doing something")
    if script.options.at is not None:
        script.echo(f"You passed at={script.options.at}")

    async with script.section("Testing cd"):
        # Each command gets its own shell, so this does not stick
        await script.cmd("cd /")
        await script.cmd("pwd")
        # This is the way to change directory for later commands
        script.cd("/")
        await script.cmd("pwd")

    script.echo("The following command will stop the script unless you pass --continue-on-error")
    await script.cmd("false")

    async with script.section("More Stuff"):
        await script.cmd("sleep 10", skip=3 < 5)
        if script.policy.show_debug:
            script.echo("In debug mode")
        else:
            script.echo("Not in debug mode")
        script.echo(
            "Here is an echo with multiple lines.\n"
            "Each line gets the comment marker.\n"
            "But blank lines stay blank, see:\n"
            "\n"
            "Even with more text below."
        )

    async with script.section("A long command"):
        # Ctrl-C here ends this section and the script carries on
        await script.cmd("sleep 3")
        script.echo("slept")

    listing = await script.cmd_output("ls")
    script.echo(f"ls returned {len(listing.splitlines())} entries")

    script.cd("~")
    branch = await script.cmd_output("git branch --show-current 2>/dev/null", ignore_nonzero_exit=True)
    if branch:
        script.echo(f"current branch = {branch}")
    else:
        script.error("couldn't get git branch")

    async with script.section("Testing user input"):
        response = await script.get_input("Enter something.", ["y", "n"], timeout=15)
        script.echo(f"you entered {response}")

    script.header("The End")


if __name__ == "__main__":
    sys.exit(script.main(body))
