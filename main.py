import logging

from rich.pretty import pprint

from bosun import *

registry = Registry()
online = {"steve", "alex"}
tags = converters.copy()
tags.register("player", entity(lambda name: name if name in online else None, kind="player"))


@command("give", aliases=("g",), permission="demo.give", usage="/give <player> [amount]")
def give(context):
    context.reply(f"gave {context['amount']} item(s) to {context['player']}")


give.parameter("player", "player").parameter("amount", "integer", default="1")


@command("admin", description="administrative tools")
def admin(context):
    context.reply("subcommands: reload, say")


@admin.command("reload", aliases=("rl",), permission="demo.admin")
def reload(context):
    context.reply("reloaded")


@admin.command("say", parameters=(Parameter("message", catchall=True),))
def say(context):
    context.reply(f"[broadcast] {context['message']}")


give.register(registry)
admin.register(registry)


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG)
    pprint(registry)

    sender = ConsoleSender("operator", ("demo.give",))
    completion = CompletionEngine(registry)
    with Dispatcher(registry, converters=tags, reporter=ConsoleReporter()) as dispatcher:
        dispatcher.dispatch(sender, "give", ["steve"])
        dispatcher.dispatch(sender, "G", ["alex", "lots"])
        dispatcher.dispatch(sender, "admin", ["rl"])
        dispatcher.dispatch(sender, "admin", ["say", "hello", "there"])
    pprint(completion.complete(sender, "admin", ["s"]))
