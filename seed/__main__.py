import asyncio

from seed.seed import main

asyncio.run(main())
