from mailbuilder.builder import MessageBuilder
from mailbuilder.session import SMTP_PORT


raw_hostname = input("SMTP server hostname [localhost]: ")  # nosec
raw_port = input(f"SMTP server port [{SMTP_PORT}]: ")  # nosec
raw_sender = input("From: ")  # nosec
raw_recipients = input("To: ")  # nosec
raw_subject = input("Subject: ")  # nosec

lines: list[str] = []

print("Enter message, end with ^D:")
while True:
    try:
        lines.append(input())  # nosec
    except EOFError:
        break

builder = MessageBuilder()
builder.set_host_name(raw_hostname or "localhost")
builder.set_smtp_port(int(raw_port) if raw_port else SMTP_PORT)
builder.set_from(raw_sender)
builder.add_to([recipient.strip() for recipient in raw_recipients.split(",")])
if raw_subject:
    builder.set_subject(raw_subject)
builder.set_content("\n".join(lines))

message = builder.send()

print(f"Sent to: {', '.join(str(address) for address in message.all_recipients())}")
