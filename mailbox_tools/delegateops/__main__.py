from mailbox_tools.delegateops.cli import main

main()
