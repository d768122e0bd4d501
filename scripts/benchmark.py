"""HTTP benchmark for the service catalog endpoints."""
import asyncio
import argparse
import statistics
import time

import httpx

BASE_URL = "http://localhost:3000"

ENDPOINTS = [
    ("GET /services", "/services"),
    ("GET /service/1", "/service/1"),
    ("GET /service/999999 (404)", "/service/999999"),
    ("GET /health", "/health"),
]


async def _timed_get(client: httpx.AsyncClient, path: str) -> tuple[float, httpx.Response]:
    start = time.perf_counter()
    resp = await client.get(path)
    return (time.perf_counter() - start) * 1000, resp


async def benchmark_endpoint(
    client: httpx.AsyncClient, name: str, path: str, iterations: int, concurrency: int
) -> dict:
    times: list[float] = []
    query_counts: list[int] = []
    server_faults = 0

    # Warmup
    for _ in range(3):
        await client.get(path)

    remaining = iterations
    while remaining > 0:
        batch = min(concurrency, remaining)
        remaining -= batch
        results = await asyncio.gather(
            *(_timed_get(client, path) for _ in range(batch)), return_exceptions=True
        )
        for result in results:
            if isinstance(result, Exception):
                server_faults += 1
                continue
            elapsed, resp = result
            if resp.status_code >= 500:
                server_faults += 1
                continue
            times.append(elapsed)
            query_counts.append(int(resp.headers.get("X-Query-Count", 0)))

    if not times:
        return {"name": name, "error": f"All {iterations} requests failed"}

    ordered = sorted(times)
    return {
        "name": name,
        "avg_ms": round(statistics.mean(times), 2),
        "p50_ms": round(ordered[len(ordered) // 2], 2),
        "p95_ms": round(ordered[int(len(ordered) * 0.95)], 2),
        "p99_ms": round(ordered[int(len(ordered) * 0.99)], 2),
        "queries": round(statistics.mean(query_counts), 1),
        "errors": server_faults,
    }


async def run_benchmark(base_url: str, iterations: int, concurrency: int):
    print("=" * 80)
    print(f"Service Catalog Benchmark: {iterations} iterations per endpoint, concurrency {concurrency}")
    print(f"Target: {base_url}")
    print("=" * 80)

    async with httpx.AsyncClient(base_url=base_url) as client:
        try:
            resp = await client.get("/health")
        except httpx.HTTPError as e:
            print(f"ERROR: Cannot connect to {base_url}: {e}")
            return
        if resp.status_code != 200:
            print(f"ERROR: Health check failed ({resp.status_code})")
            return
        print(f"Health: {resp.json()}")

        print()
        print(f"{'Endpoint':<32} {'Avg':>9} {'P50':>9} {'P95':>9} {'P99':>9} {'Queries':>8} {'5xx':>4}")
        print("-" * 80)

        for name, path in ENDPOINTS:
            result = await benchmark_endpoint(client, name, path, iterations, concurrency)
            if "error" in result:
                print(f"{result['name']:<32} {'ERROR':>9}")
                continue
            print(
                f"{result['name']:<32} "
                f"{result['avg_ms']:>7.1f}ms "
                f"{result['p50_ms']:>7.1f}ms "
                f"{result['p95_ms']:>7.1f}ms "
                f"{result['p99_ms']:>7.1f}ms "
                f"{result['queries']:>8} "
                f"{result['errors']:>4}"
            )

        print("-" * 80)
        print("\nBenchmark complete.")


def main():
    parser = argparse.ArgumentParser(description="Benchmark the service catalog API")
    parser.add_argument("-n", "--iterations", type=int, default=50, help="Iterations per endpoint")
    parser.add_argument("-c", "--concurrency", type=int, default=10, help="Concurrent requests per batch")
    parser.add_argument("--base-url", default=BASE_URL, help="API base URL")
    args = parser.parse_args()
    asyncio.run(run_benchmark(args.base_url, args.iterations, args.concurrency))


if __name__ == "__main__":
    main()
