# rediswire

`rediswire` is a small library with no dependencies. It provides the
protocol-level pieces a Redis client is built from:

- encoding commands as RESP requests;
- the objects that represent replies;
- the queues that pair replies with callbacks;
- the bookkeeping for pub/sub subscriptions.

## Install

```
pip install rediswire
```

## Encoding commands: `rediswire.protocol`

`format_command(fmt, *args)` expands a printf-like template into a multi-bulk
request. Arguments in the template are separated by spaces. A value that is
interpolated never splits an argument, even if it contains spaces.

The template understands these directives:

- `%s` inserts a `str` or bytes value. The value is cut at its first NUL byte.
- `%b` inserts a bytes value, binary safe.
- `%%` inserts a literal percent sign.
- The printf integer conversions `d i o u x X` are accepted. They may carry the
  `hh`, `h`, `l` or `ll` size modifiers.
- The printf floating-point conversions `e E f F g G a A` are accepted.
- Flags, a field width and a precision are allowed on the integer and
  floating-point conversions.

```python
from rediswire.protocol import format_command, format_command_argv, FormatError

format_command("SET %s %b", "foo", b"hello")
# b'*3\r\n$3\r\nSET\r\n$3\r\nfoo\r\n$5\r\nhello\r\n'

format_command("INCRBY %s %d", "counter", 5)
# b'*3\r\n$6\r\nINCRBY\r\n$7\r\ncounter\r\n$1\r\n5\r\n'

format_command_argv([b"GET", "foo"])
# b'*2\r\n$3\r\nGET\r\n$3\r\nfoo\r\n'
```

`FormatError` (a `ValueError`) is raised in two cases:

- the template holds a conversion that is not supported;
- the template needs more values than were given.

Both functions raise `TypeError` for a `%s`, `%b` or argv value that is
neither `str` nor bytes-like.

## Replies: `rediswire.reply`

`ReplyType` lists every RESP2/RESP3 reply kind:

- `STRING`, `ARRAY`, `INTEGER`, `NIL`, `STATUS`, `ERROR`, `DOUBLE`;
- `BOOL`, `MAP`, `SET`, `ATTR`, `PUSH`, `BIGNUM`, `VERB`.

A `Reply` has these fields:

- `type`;
- `integer`, which holds integers, and booleans as 0 or 1;
- `dval`, the value of a double;
- `string`, the bytes payload, which for a double is the server's text;
- `vtype`, the format of a verbatim string;
- `elements`, the children of an aggregate.

It also has a `len` property and an `is_push()` method.

`ReplyFactory` builds replies. When it is given a parent, it stores each new
reply in the parent's `elements` at the given index:

```python
from rediswire.reply import ReplyFactory, ReplyType

f = ReplyFactory()
arr = f.create_array(ReplyType.ARRAY, 2)
f.create_string(ReplyType.STRING, b"key", arr, 0)
f.create_integer(42, arr, 1)

verb = f.create_string(ReplyType.VERB, b"txt:hello")
verb.vtype, verb.string   # ('txt', b'hello')
```

The factory raises `ValueError` in these cases:

- a type is passed to the wrong builder;
- the element count is negative;
- a verbatim string is too short for its header;
- the parent is not an aggregate.

## Callbacks: `rediswire.callbacks`

- `Callback` holds the following:
  - `fn`, the reply handler;
  - `privdata`, the user's data;
  - `pending_subs` and `unsubscribe_sent`, the subscription bookkeeping.
- `CallbackQueue` is a FIFO with `push` and `shift`. `shift` returns `None`
  when the queue is empty. The queue supports `len()`, truth testing and
  iteration. It stores copies of the callbacks pushed into it.
- `Subscriptions` keeps one registry for channels and one for patterns, plus
  a `pending_unsubs` counter. Its methods are:
  - `add(name, callback, pattern)` registers a callback. When the name is
    already registered, the new callback's `pending_subs` is one more than
    the old one's.
  - `mark_unsubscribe(names, pattern)` records an unsubscribe. With no names
    it applies to the whole registry.
  - `registry(pattern)` returns the channel or pattern registry.
  - `is_empty()` tells whether nothing is subscribed and no unsubscribe
    replies are pending.
  - `all_callbacks()` yields every registered callback, channels first.
  - `clear()` removes everything.
- `gen_hash(data)` is the djb2 hash of the data, as an unsigned 32-bit value.

## Pub/sub recognition: `rediswire.pubsub`

```python
from rediswire.protocol import format_command
from rediswire.pubsub import classify_command, split_command, CommandKind

split_command(format_command("GET foo"))        # [b'GET', b'foo']
classify_command(format_command("PSUBSCRIBE news.*"))
# (CommandKind.SUBSCRIBE, True, [b'news.*'])
```

`classify_command` sorts a command into one of four `CommandKind` values:
`SUBSCRIBE`, `UNSUBSCRIBE`, `MONITOR` or `REGULAR`.

- A command whose name starts with `p` is a pattern variant.
- `SUBSCRIBE` without any channel counts as `REGULAR`.

It raises `ValueError` for an empty or malformed request.

Two functions look at replies:

- `is_subscribe_reply(reply)` recognises subscribe, unsubscribe and message
  notifications, and their `p` variants.
- `is_spontaneous_push(reply)` is true for push messages that are not
  related to subscriptions.

## What this package does not do

`rediswire` does not open connections or do any network I/O. It has no
connection context, no reader that parses bytes from the server into `Reply`
objects, and no event-driven client that sends commands and dispatches
replies to callbacks. The modules here provide the encoding, the reply types
and the bookkeeping that such a client would use. The socket handling, the
parsing of replies and the event loop are left to the code that uses it.